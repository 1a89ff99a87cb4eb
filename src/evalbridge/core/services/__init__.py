"""Domain services for evalbridge."""

from evalbridge.core.services.evaluation_responder import EvaluationResponder

__all__ = [
    "EvaluationResponder",
]
