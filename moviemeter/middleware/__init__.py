from moviemeter.middleware.body_limit import BodySizeLimitMiddleware
from moviemeter.middleware.request_id import RequestIDMiddleware, get_request_id

__all__ = ["BodySizeLimitMiddleware", "RequestIDMiddleware", "get_request_id"]
