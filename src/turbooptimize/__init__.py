from .attributes import find_attribute_value, read_tag_attributes
from .errors import ConfigError, OptimizeError, ScanError, SetupError
from .inject import inject_html
from .optimize import FileFailure, OptimizeReport, optimize
from .options import OptimizeOptions, load_options
from .preload import preload_js
from .scanner import DependencySet, collect_modules, scan_entry_points
from .tokenizer import Tokenizer, tokenize
from .tokens import Token, TokenKind

__all__ = [
    "ConfigError",
    "DependencySet",
    "FileFailure",
    "OptimizeError",
    "OptimizeOptions",
    "OptimizeReport",
    "ScanError",
    "SetupError",
    "Token",
    "TokenKind",
    "Tokenizer",
    "collect_modules",
    "find_attribute_value",
    "inject_html",
    "load_options",
    "optimize",
    "preload_js",
    "read_tag_attributes",
    "scan_entry_points",
    "tokenize",
]
