"""
Agents module containing the interview's language components.

Each agent handles one step of a turn: classifying the candidate's intent,
composing the model prompt, and interpreting the model's reply.
"""

from hirelytics_interview.agents.intent_classifier import (
    DEFAULT_PHRASES,
    IntentClassification,
    IntentClassifier,
    PhraseLists,
)
from hirelytics_interview.agents.prompt_composer import PromptComposer
from hirelytics_interview.agents.response_interpreter import Interpretation, ResponseInterpreter

__all__ = [
    "DEFAULT_PHRASES",
    "IntentClassification",
    "IntentClassifier",
    "Interpretation",
    "PhraseLists",
    "PromptComposer",
    "ResponseInterpreter",
]
