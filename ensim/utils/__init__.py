"""
Simple utilities shared by the model and simulator code.
"""
from .logging import get_logger
