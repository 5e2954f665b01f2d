"""Narrator hooks: user code that rewrites commentary prompts and replies.

A narrator config may name a ``preprocess`` hook, which receives the chat
messages for one round side plus the runtime options and returns both
(possibly edited), and a ``postprocess`` hook, which receives the raw
commentary text and returns the cleaned line. Hooks are referenced as
``package.module:function`` and resolved once, when the narrator is built.
"""

from __future__ import annotations

import importlib
from typing import Callable, List, Mapping, NamedTuple, Optional, Tuple

from brawler.domain.config import NarratorCfg
from brawler.infrastructure.narrators.base import Message, NarratorValidationError

PreprocessFn = Callable[[List[Message], Optional[dict]], Tuple[List[Message], Optional[dict]]]
PostprocessFn = Callable[[str], str]


class NarratorHooks(NamedTuple):
    preprocess: Optional[PreprocessFn]
    postprocess: Optional[PostprocessFn]


def load_callable(spec: str) -> Callable:
    """Resolve a ``module:function`` reference from a narrator config."""

    module_path, sep, func_name = spec.partition(":")
    if not sep or not module_path or not func_name:
        raise NarratorValidationError(f"Narrator hook '{spec}' must look like 'module:function'.")
    try:
        module = importlib.import_module(module_path)
    except ImportError as exc:
        raise NarratorValidationError(f"Narrator hook module '{module_path}' cannot be imported: {exc}") from exc
    func = getattr(module, func_name, None)
    if func is None:
        raise NarratorValidationError(f"Narrator hook module '{module_path}' has no '{func_name}'.")
    if not callable(func):
        raise NarratorValidationError(f"Narrator hook '{spec}' is not a function.")
    return func


def attach_narrator_hooks(cfg: NarratorCfg) -> NarratorHooks:
    return NarratorHooks(
        preprocess=load_callable(cfg.preprocess) if cfg.preprocess else None,
        postprocess=load_callable(cfg.postprocess) if cfg.postprocess else None,
    )


def _check_messages(messages: object) -> List[Message]:
    if not isinstance(messages, list):
        raise NarratorValidationError("Preprocess hook must return the prompt as a list of messages.")
    for message in messages:
        if not isinstance(message, dict) or not isinstance(message.get("content"), str):
            raise NarratorValidationError("Every prompt message must be a dict with string 'content'.")
    return messages


def run_preprocess(
    fn: Optional[PreprocessFn],
    *,
    messages: List[Message],
    runtime: Optional[dict],
) -> Tuple[List[Message], Optional[dict]]:
    """Let *fn* rewrite the commentary prompt and runtime options."""

    if fn is None:
        return messages, runtime

    result = fn(messages, runtime)
    if not isinstance(result, tuple) or len(result) != 2:
        raise NarratorValidationError("Preprocess hook must return (messages, runtime).")
    new_messages, new_runtime = result
    if new_runtime is not None and not isinstance(new_runtime, Mapping):
        raise NarratorValidationError("Preprocess hook runtime must be a mapping or None.")
    return _check_messages(new_messages), dict(new_runtime) if new_runtime is not None else None


def run_postprocess(fn: Optional[PostprocessFn], text: str) -> str:
    if fn is None:
        return text
    cleaned = fn(text)
    if not isinstance(cleaned, str):
        raise NarratorValidationError("Postprocess hook must return the commentary as a string.")
    return cleaned


__all__ = [
    "NarratorHooks",
    "PreprocessFn",
    "PostprocessFn",
    "load_callable",
    "attach_narrator_hooks",
    "run_preprocess",
    "run_postprocess",
]
