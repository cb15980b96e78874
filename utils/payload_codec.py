# utils/payload_codec.py - JSON encoding of request bodies and decoding of responses
import functools
import logging
import os

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError
from pydantic.errors import PydanticSchemaGenerationError
from pydantic_core import PydanticSerializationError

from errors import DecodingError, EncodingError

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()


def get_logger(name: str = "api-client"):
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(LOG_LEVEL)
    return logger


class ResultShape(BaseModel):
    """Base for declared request/response schemas.

    Fields match by name or alias, unknown keys are dropped. Give a field a
    default to tolerate its absence in the payload.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


@functools.lru_cache(maxsize=None)
def _adapter(shape):
    return TypeAdapter(shape)


def encode_body(body) -> str:
    """Serialize a structured body (model, dataclass, mapping...) to compact JSON.

    Fields holding ``None`` are left out of the payload.
    """
    try:
        if isinstance(body, BaseModel):
            return body.model_dump_json(by_alias=True, exclude_none=True)
        return _adapter(type(body)).dump_json(body, by_alias=True, exclude_none=True).decode("utf-8")
    except (PydanticSerializationError, PydanticSchemaGenerationError) as exc:
        raise EncodingError(f"cannot serialize {type(body).__name__} to JSON: {exc}") from exc


def decode_body(content, result_shape, url=None, status_code=None):
    """Decode a raw JSON body into ``result_shape``.

    The same adapter is used for every call variant, so GET and POST
    responses follow identical field matching and coercion rules.
    """
    try:
        return _adapter(result_shape).validate_json(content)
    except ValidationError as exc:
        raise DecodingError(
            f"cannot decode response into {getattr(result_shape, '__name__', result_shape)}: {exc}",
            url=url,
            status_code=status_code,
            body=content,
        ) from exc
