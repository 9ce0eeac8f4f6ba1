"""HTTP client used by deploy, notification and release publishing."""

from .http import HttpClient, HttpError, HttpResponse, MockHttpClient, RealHttpClient

__all__ = ["HttpClient", "HttpError", "HttpResponse", "MockHttpClient", "RealHttpClient"]
