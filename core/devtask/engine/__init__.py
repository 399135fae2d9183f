"""Engine module - classification, routing and the turn pipeline."""

from devtask.engine.agent import DevTaskAgent
from devtask.engine.classifier import IntentClassifier
from devtask.engine.router import ActionRouter

__all__ = [
    "DevTaskAgent",
    "IntentClassifier",
    "ActionRouter",
]
