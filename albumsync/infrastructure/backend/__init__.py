from .album_api_client import HttpAlbumApiClient

__all__ = ["HttpAlbumApiClient"]
