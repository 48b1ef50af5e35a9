"""
Base generator interface for all code generation targets.

Defines the contract that all language emitters must implement and the
error-handling wrapper that turns a run into a GenerationResult.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from ..logging_config import get_logger
from .config import ConfigError, GeneratorConfig, get_config_manager, load_config
from .errors import GeneratorError
from .flatten import FlattenPolicy, flatten_graph
from .mapping import MappingTable
from .schema import SchemaGraph
from .templates import TemplateEngine, TemplateError, create_template_engine
from .types import PrimitiveKind

logger = get_logger(__name__)


@dataclass(frozen=True)
class Declaration:
    """One rendered top-level declaration."""

    name: str
    kind: str  # alias, struct, union, function
    text: str


class CodeGenerator(ABC):
    """Abstract base class for all code generators."""

    def __init__(self, config: Optional[GeneratorConfig] = None):
        """Initialize generator with optional configuration."""
        self.config = config or load_config()
        self._template_engine = None
        self._setup_templates()

    def _setup_templates(self):
        """Setup template engine for this generator."""
        self._template_engine = create_template_engine()
        self.register_templates(self._template_engine)

    @property
    @abstractmethod
    def language_name(self) -> str:
        """Return the name of the target language (e.g., 'typescript')."""
        pass

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """Return the file extension for generated files (e.g., '.ts')."""
        pass

    @property
    @abstractmethod
    def header(self) -> str:
        """Header block the writer puts at the top of every generated file."""
        pass

    @abstractmethod
    def default_primitives(self) -> Mapping[PrimitiveKind, str]:
        """Target syntax for each primitive kind before overrides."""
        pass

    def register_templates(self, engine: TemplateEngine):
        """Hook for generators to add their in-memory templates."""
        pass

    @property
    def template_engine(self) -> TemplateEngine:
        """Get the template engine for this generator."""
        if self._template_engine is None:
            self._setup_templates()
        return self._template_engine

    def mapping_table(self) -> MappingTable:
        """Mapping table derived from this generator's configuration."""
        return MappingTable.from_config(self.config, self.default_primitives())

    @abstractmethod
    def emit(self, graph: SchemaGraph, mapping: Optional[MappingTable] = None) -> List[Declaration]:
        """
        Render every root definition of ``graph``.

        Args:
            graph: Graph to emit
            mapping: Mapping table; derived from the configuration when omitted

        Returns:
            Declarations in emission order
        """
        pass

    def generate(self, graph: SchemaGraph, mapping: Optional[MappingTable] = None) -> str:
        """Emit ``graph`` and join the declarations into file content."""
        declarations = self.emit(graph, mapping)
        separator = self.config.line_ending * 2
        return separator.join(d.text for d in declarations)

    # Template helper methods

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """Render a template with context."""
        return self.template_engine.render_template(template_name, context)

    def template_exists(self, template_name: str) -> bool:
        """Check if a template exists."""
        return self.template_engine.template_exists(template_name)


class GenerationResult:
    """Container for generation results and metadata."""

    def __init__(
        self,
        code: str,
        declarations: List[Declaration] = None,
        warnings: List[str] = None,
        metadata: Dict[str, Any] = None,
    ):
        """
        Initialize generation result.

        Args:
            code: Generated code, without the file header
            declarations: Declarations the code was joined from
            warnings: Any warnings from generation
            metadata: Additional metadata about generation
        """
        self.code = code
        self.declarations = declarations or []
        self.warnings = warnings or []
        self.metadata = metadata or {}
        self.success = True
        self.error_message = None
        self.exception = None

    @classmethod
    def error(cls, message: str, exception: Exception = None) -> "GenerationResult":
        """Create a failed generation result."""
        result = cls(code="")
        result.success = False
        result.error_message = message
        result.exception = exception
        return result


def prepare_graph(graph: SchemaGraph, config: GeneratorConfig) -> SchemaGraph:
    """
    Apply the configured flattening and naming scheme.

    Returns ``graph`` itself when neither flattening nor a prefix is set.
    """
    if not (config.flatten or config.type_prefix or config.flatten_suffix):
        return graph
    return flatten_graph(graph, FlattenPolicy.from_config(config))


def generate_code(
    generator: CodeGenerator,
    graph: SchemaGraph,
    mapping: Optional[MappingTable] = None,
) -> GenerationResult:
    """
    Run one generation with error handling.

    The graph is flattened and renamed according to the generator's
    configuration, then emitted. Any fatal condition yields a failed
    result with no code.

    Args:
        generator: Code generator instance
        graph: Source schema graph
        mapping: Mapping table; derived from the configuration when omitted

    Returns:
        GenerationResult with code, declarations, warnings, and metadata
    """
    try:
        warnings = get_config_manager().validate_config(generator.config)
        for warning in warnings:
            logger.warning(warning)

        prepared = prepare_graph(graph, generator.config)
        declarations = generator.emit(prepared, mapping)
        separator = generator.config.line_ending * 2
        code = separator.join(d.text for d in declarations)
    except (GeneratorError, TemplateError, ConfigError) as e:
        logger.error("Code generation failed: %s", e)
        return GenerationResult.error(f"Code generation failed: {e}", exception=e)

    metadata = {
        "language": generator.language_name,
        "file_extension": generator.file_extension,
        "definition_count": len(graph),
        "declaration_count": len(declarations),
        "flattened": generator.config.flatten,
        "renames": [
            f"{r.owner}.{r.original_name} -> {r.new_name}" for r in prepared.renames
        ],
    }
    return GenerationResult(code, declarations, warnings, metadata)
