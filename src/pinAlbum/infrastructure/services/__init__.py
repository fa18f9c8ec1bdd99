from .asset_fetcher import HttpAssetFetcher
from .flickr_search_client import FlickrSearchClient
from .location_namer import ReverseGeocoderNamer

__all__ = ["FlickrSearchClient", "HttpAssetFetcher", "ReverseGeocoderNamer"]
