from ftprovider.crud.file_transfer import file_transfer_crud

__all__ = ["file_transfer_crud"]
