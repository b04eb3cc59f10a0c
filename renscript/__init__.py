"""RenScript — scripting language compiler for 3D scene-graph objects."""

__version__ = "0.1.0"

from renscript.errors import CompileError, ErrorKind, RenScriptError, SourceLocation
from renscript.capabilities import CapabilityTable, list_capabilities, load_capabilities
from renscript.compiler import check, compile, compile_script
