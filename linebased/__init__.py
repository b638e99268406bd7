"""Line-based scripts with template and include expansion.

A script is a sequence of expressions: a command name followed by a body,
with tab-indented continuation lines and `#` comments. No quotes, no
escaping.

    define greet name
    	echo Hello, $name!
    greet Alice

The expansion engine turns the script above into `echo Hello, Alice!`.
"""

from .config import ExpandConfig
from .decoder import Decoder, iter_expressions
from .errors import (
    DefinitionError,
    ExpressionError,
    IncludeError,
    InvocationError,
    LinebasedError,
    ScriptSyntaxError,
)
from .expander import DecoderState, ExpandingDecoder, expand, expand_pairs, write_stack
from .expression import Args, Expanded, Expression, cut_field, parse_args, parse_args2, parse_args3
from .fs import DirFS, FileSystem, MapFS
from .template import Template, TemplateRegistry

__all__ = [
    "Args",
    "Decoder",
    "DecoderState",
    "DefinitionError",
    "DirFS",
    "ExpandConfig",
    "Expanded",
    "ExpandingDecoder",
    "Expression",
    "ExpressionError",
    "FileSystem",
    "IncludeError",
    "InvocationError",
    "LinebasedError",
    "MapFS",
    "ScriptSyntaxError",
    "Template",
    "TemplateRegistry",
    "cut_field",
    "expand",
    "expand_pairs",
    "iter_expressions",
    "parse_args",
    "parse_args2",
    "parse_args3",
    "write_stack",
]
