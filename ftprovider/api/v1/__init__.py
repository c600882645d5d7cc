"""API v1 汇总路由：统一挂载所有版本化的子路由。"""

from fastapi import APIRouter

from ftprovider.api.v1.endpoints import file_transfers

api_router = APIRouter()
api_router.include_router(file_transfers.router)
api_router.include_router(file_transfers.alias_router)
api_router.include_router(file_transfers.type_router)
