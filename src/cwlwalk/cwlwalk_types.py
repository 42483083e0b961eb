from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

# See https://mypy.readthedocs.io/en/stable/kinds_of_types.html#type-aliases

KV = Dict[str, Any]
Cwl = KV
Json = KV
Yaml = KV

# A parsed descriptor (or any fragment of one) is a plain python tree of
# dict / list / scalar, exactly as returned by yaml.load with a SafeLoader.
DocumentNode = Any

# Dotted path of a step, i.e. 'dockstore_outer.inner'
StepId = str

NODE_PREFIX = 'dockstore_'
BEGIN_KEY = 'UniqueBeginKey'
END_KEY = 'UniqueEndKey'


# NamedTuple is used to emphasize immutability, the same as in the rest of this package.
# See https://mypy.readthedocs.io/en/stable/kinds_of_types.html#named-tuples


class SourceFile(NamedTuple):
    absolute_path: str
    content: str


class ToolInfo(NamedTuple):
    entry_id: Optional[str]
    dependency_ids: List[str]


class EntryType(str, Enum):
    WORKFLOW = 'Workflow'
    COMMAND_LINE_TOOL = 'CommandLineTool'
    EXPRESSION_TOOL = 'ExpressionTool'


class RunTargetType(str, Enum):
    """The kind of entry a workflow step runs, as reported in the DAG."""
    WORKFLOW = 'workflow'
    TOOL = 'tool'
    EXPRESSION_TOOL = 'expressionTool'
    NOT_APPLICABLE = 'n/a'


class DockerSpecifier(str, Enum):
    NO_TAG = 'NO_TAG'
    LATEST = 'LATEST'
    TAG = 'TAG'
    DIGEST = 'DIGEST'
    PARAMETER = 'PARAMETER'


class DockerImageReference(str, Enum):
    LITERAL = 'LITERAL'  # e.g. dockerPull: ubuntu:20.04
    DYNAMIC = 'DYNAMIC'  # e.g. a workflow input or an expression
    UNKNOWN = 'UNKNOWN'


class Registry(str, Enum):
    DOCKER_HUB = 'registry.hub.docker.com'
    QUAY_IO = 'quay.io'
    GITHUB_CONTAINER_REGISTRY = 'ghcr.io'
    AMAZON_ECR = 'public.ecr.aws'
    SEVEN_BRIDGES = 'images.sbgenomics.com'


class OutputMode(str, Enum):
    DAG = 'dag'
    TOOLS = 'tools'


class DockerInfo(NamedTuple):
    run_path: str
    docker_pull: Optional[str]
    docker_url: Optional[str]
    specifier: Optional[DockerSpecifier]


class WalkResult(NamedTuple):
    """Everything the workflow walker accumulates for one root workflow.

    All three dicts are keyed by StepId. node_pairs preserves the order in which
    the top-level steps were visited and pairs each with its docker url.
    """
    tool_info: Dict[StepId, ToolInfo]
    node_docker_info: Dict[StepId, DockerInfo]
    step_to_type: Dict[StepId, RunTargetType]
    node_pairs: List[Tuple[StepId, Optional[str]]]


class ParsedInformation(NamedTuple):
    has_http_imports: bool
    has_local_imports: bool


class VersionTypeValidation(NamedTuple):
    valid: bool
    messages: Dict[str, str]  # file path -> message
