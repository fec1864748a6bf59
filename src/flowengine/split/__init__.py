# src/flowengine/split/__init__.py
"""Engines de particionamento (Split Registry) do flowengine."""

from .engines import DEFAULT_PARAMS, split_cv, split_random, split_random_stratified, split_userdefined

__all__ = ["DEFAULT_PARAMS", "split_cv", "split_random", "split_random_stratified", "split_userdefined"]
