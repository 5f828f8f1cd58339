"""Depth levels and the generation parameters attached to each of them."""
from dataclasses import dataclass
from enum import Enum
from typing import Dict

from config import SIMPLE_MODEL, COMPLEX_MODEL


class DepthLevel(str, Enum):
    """Caller-selected verbosity of a generated answer, ordered shallow to thorough."""
    NORMAL = "normal"
    SIMPLE = "simple"
    STEP_BY_STEP = "step-by-step"
    DEEP = "deep"
    DEEPER = "deeper"


@dataclass(frozen=True)
class DepthProfile:
    """Prompt instruction and sampling parameters for one depth level."""
    instruction: str
    temperature: float
    top_k: int
    top_p: float
    max_tokens: int
    model: str


DEPTH_PROFILES: Dict[DepthLevel, DepthProfile] = {
    DepthLevel.NORMAL: DepthProfile(
        instruction="Provide a clear, direct answer that addresses the specific question.",
        temperature=0.1,
        top_k=20,
        top_p=0.9,
        max_tokens=1024,
        model=SIMPLE_MODEL,
    ),
    DepthLevel.SIMPLE: DepthProfile(
        instruction=(
            "Explain the answer in simple, everyday language that a beginner can follow, "
            "avoiding jargon and keeping it short."
        ),
        temperature=0.1,
        top_k=20,
        top_p=0.9,
        max_tokens=1024,
        model=SIMPLE_MODEL,
    ),
    DepthLevel.STEP_BY_STEP: DepthProfile(
        instruction=(
            "Break the answer down into clear, numbered steps and explain each step "
            "in the order it happens."
        ),
        temperature=0.1,
        top_k=20,
        top_p=0.9,
        max_tokens=1024,
        model=SIMPLE_MODEL,
    ),
    DepthLevel.DEEP: DepthProfile(
        instruction=(
            "Provide a comprehensive, in-depth explanation with detailed examples "
            "and thorough context."
        ),
        temperature=0.3,
        top_k=40,
        top_p=0.95,
        max_tokens=2048,
        model=COMPLEX_MODEL,
    ),
    DepthLevel.DEEPER: DepthProfile(
        instruction=(
            "Provide an extremely detailed, exhaustive explanation covering all aspects, "
            "with multiple examples and practical applications."
        ),
        temperature=0.4,
        top_k=40,
        top_p=0.95,
        max_tokens=3072,
        model=COMPLEX_MODEL,
    ),
}


def get_depth_profile(depth: DepthLevel) -> DepthProfile:
    """Look up the profile for a depth level, accepting raw strings too."""
    return DEPTH_PROFILES[DepthLevel(depth)]
