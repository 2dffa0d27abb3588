from typing import BinaryIO


class StorageProvider:
    def url_for(self, key: str) -> str:
        raise NotImplementedError

    def copy_in(self, src: bytes | BinaryIO, key: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError
