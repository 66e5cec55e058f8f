"""
JSON body parsing middleware.

Runs in front of the routes and decodes ``application/json`` bodies once,
so handlers can read ``request.json`` without guarding against bad input.
A body that is not valid JSON, or whose top level is not an object or an
array, is answered with 400 before any handler runs.

Requests with another content type, or with no body, pass through
untouched; handlers then see no fields at all.
"""

import logging

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest, HTTPParseError
from ..http.response import HTTPResponse, bad_request


logger = logging.getLogger(__name__)


class JSONBodyMiddleware(Middleware):
    """
    Reject unparseable JSON bodies.

    Args:
        strict: Only accept objects and arrays at the top level.
    """

    def __init__(self, strict: bool = True):
        self.strict = strict

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        if request.is_json and request.body:
            try:
                payload = request.json
            except HTTPParseError as e:
                logger.debug(f"Rejected body for {request.method} {request.path}: {e}")
                return bad_request(str(e))

            if self.strict and not isinstance(payload, (dict, list)):
                return bad_request("JSON body must be an object or an array")

        return next(request)
