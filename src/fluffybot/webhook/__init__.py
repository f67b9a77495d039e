from .merge import MergeEventRouter, extract_issue_iid_from_description
from .routing import Route, RouteDecision, route_event
from .validation import validate_issue_event

__all__ = [
    "MergeEventRouter",
    "extract_issue_iid_from_description",
    "Route",
    "RouteDecision",
    "route_event",
    "validate_issue_event",
]
