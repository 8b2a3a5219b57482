from .string_response import StringResponse

__all__ = ["StringResponse"]
