"""
Skald Message Validator
-----------------------
Structural checks for decoded client messages, backed by ``jsonschema``.

A message must first satisfy the minimal JSON-RPC notification shape. It is
then checked against every request (or notification) sub-schema. When nothing
matches, the per-sub-schema violations decide between an unknown method and
invalid params.
"""

import logging
from typing import Any, Dict, List, Mapping

from jsonschema import Draft7Validator
from jsonschema.exceptions import ValidationError

from . import definitions
from .errors import InvalidParamsError, InvalidRequestError, MethodNotFoundError

logger = logging.getLogger("Skald.mcp.validator")


def _pointer(error: ValidationError) -> str:
    return "/" + "/".join(str(part) for part in error.absolute_path)


def _describe(error: ValidationError) -> str:
    pointer = _pointer(error)
    if pointer == "/":
        return f"{error.message} at root"
    return f"{error.message} at `{pointer}`"


class MessageValidator:
    """Validate inbound client messages against the declarative message schema."""

    def __init__(
        self,
        requests: Mapping[str, Dict[str, Any]] = definitions.CLIENT_REQUESTS,
        notifications: Mapping[str, Dict[str, Any]] = definitions.CLIENT_NOTIFICATIONS,
    ):
        self._minimal = Draft7Validator(definitions.JSONRPC_NOTIFICATION)
        self._requests = {name: Draft7Validator(schema) for name, schema in requests.items()}
        self._notifications = {name: Draft7Validator(schema) for name, schema in notifications.items()}

    @staticmethod
    def _errors(validator: Draft7Validator, message: Any) -> List[ValidationError]:
        return sorted(validator.iter_errors(message), key=lambda e: (_pointer(e), e.message))

    def validate(self, message: Any) -> None:
        """
        Raise when ``message`` is not an acceptable client message.

        Raises:
            InvalidRequestError: the minimal JSON-RPC shape is missing.
            MethodNotFoundError: every sub-schema rejected the method itself.
            InvalidParamsError: the method is known but its params are wrong.
        """
        minimal_errors = self._errors(self._minimal, message)
        if minimal_errors:
            raise InvalidRequestError(
                "Invalid request",
                data={"errors": [_describe(e) for e in minimal_errors]},
            )

        candidates = self._requests if "id" in message else self._notifications
        grouped: Dict[str, List[ValidationError]] = {}
        for name, validator in candidates.items():
            errors = self._errors(validator, message)
            if not errors:
                return
            grouped[name] = errors

        for name, errors in grouped.items():
            if any(_pointer(e) == "/method" for e in errors):
                continue
            logger.debug("Message for %s failed validation: %d error(s)", name, len(errors))
            raise InvalidParamsError(
                "Invalid params",
                data={"errors": [_describe(e) for e in errors]},
            )

        raise MethodNotFoundError(f"Unknown method: {message.get('method')}")
