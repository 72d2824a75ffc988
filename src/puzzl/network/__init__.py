from puzzl.network.http_request import DataType, HttpRequest, HttpRequestOptions

__all__ = ["DataType", "HttpRequest", "HttpRequestOptions"]
