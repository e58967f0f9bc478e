"""Instrumentation for the app's action surface."""

from __future__ import annotations

import inspect
import logging
import time
from functools import wraps
from typing import Any, Callable, Dict, ParamSpec, TypeVar

from pydantic import BaseModel, ValidationError

from flow_app.logging_config import get_logger, log_event, operation_context

LOGGER = get_logger(__name__)
P = ParamSpec("P")
R = TypeVar("R")

PREVIEW_KEYS = 6


def _payload_preview(arguments: Dict[str, Any]) -> Dict[str, Any]:
    preview = dict(list(arguments.items())[:PREVIEW_KEYS])
    if len(arguments) > PREVIEW_KEYS:
        preview["truncated"] = True
    return preview


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


def instrument_action(
    action_name: str,
    input_model: type[BaseModel] | None = None,
    on_validation_error: Callable[[ValidationError], R] | None = None,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Wrap an app action with payload validation and structured logs.

    The wrapped method is called with keyword arguments only. When
    ``input_model`` rejects the payload the action never runs and
    ``on_validation_error`` supplies the return value; otherwise the validated
    values (clamped counts, stripped names) replace what the caller passed.
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        signature = inspect.signature(func)
        takes_self = "self" in signature.parameters

        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            bound = signature.bind_partial(*args, **kwargs)
            arguments = dict(bound.arguments)
            owner = (arguments.pop("self"),) if takes_self else ()

            with operation_context(action_name) as correlation_id:
                start = time.perf_counter()
                if input_model is not None:
                    try:
                        validated = input_model.model_validate(arguments)
                    except ValidationError as exc:
                        log_event(
                            LOGGER,
                            logging.WARNING,
                            "action_validation_failed",
                            action=action_name,
                            correlation_id=correlation_id,
                            errors=[error.get("msg", "") for error in exc.errors()],
                        )
                        if on_validation_error is not None:
                            return on_validation_error(exc)
                        raise
                    arguments.update(validated.model_dump(include=set(arguments)))

                log_event(
                    LOGGER,
                    logging.INFO,
                    "action_started",
                    action=action_name,
                    correlation_id=correlation_id,
                    payload=_payload_preview(arguments),
                )
                try:
                    result = func(*owner, **arguments)
                except Exception:
                    log_event(
                        LOGGER,
                        logging.ERROR,
                        "action_failed",
                        action=action_name,
                        correlation_id=correlation_id,
                        duration_ms=_elapsed_ms(start),
                        exc_info=True,
                    )
                    raise
                log_event(
                    LOGGER,
                    logging.INFO,
                    "action_completed",
                    action=action_name,
                    correlation_id=correlation_id,
                    duration_ms=_elapsed_ms(start),
                    status=getattr(result, "status", None),
                    applied=getattr(result, "applied", None),
                )
                return result

        return wrapper

    return decorator


__all__ = ["instrument_action"]
