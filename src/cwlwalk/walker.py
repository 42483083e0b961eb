import logging
from typing import Any, Dict, List, Optional

from . import classifier, docker
from .cwlwalk_types import (NODE_PREFIX, Cwl, DockerInfo, DockerSpecifier, EntryType, OutputMode,
                            RunTargetType, StepId, ToolInfo, WalkResult, Yaml)
from .exceptions import CWL_PARSE_ERROR, CWL_PARSE_SECONDARY_ERROR, CwlParseError, UnhandledRunTargetError
from .preprocessor import Preprocessor
from .utils import as_list

logger = logging.getLogger('cwlwalk.walker')


def get_docker_pull(requirements: Any) -> Optional[str]:
    """Returns the dockerPull: of the first DockerRequirement, if any.

    Args:
        requirements (Any): The requirements: or hints: tag, in either list or map form

    Returns:
        Optional[str]: The docker image, or None
    """
    for requirement in as_list(requirements, 'class'):
        if not isinstance(requirement, Dict):
            continue
        docker_pull = requirement.get('dockerPull')
        if requirement.get('class') == 'DockerRequirement' and docker_pull is not None:
            return str(docker_pull)
    return None


def get_requirement_or_hint(cwl: Yaml, default_docker_path: Optional[str]) -> Optional[str]:
    """Determines the docker image of a workflow, step, or tool. Requirements take
    precedence over hints, and both take precedence over default_docker_path.

    Args:
        cwl (Yaml): A workflow, a workflow step, or a tool
        default_docker_path (Optional[str]): The docker image inherited from the enclosing workflow (or step)

    Returns:
        Optional[str]: The docker image, or None
    """
    docker_pull = get_docker_pull(cwl.get('requirements'))
    if docker_pull is None:
        docker_pull = get_docker_pull(cwl.get('hints'))
    if docker_pull is None:
        docker_pull = default_docker_path
    return docker_pull


def process_dependencies(dependencies: List[str], sources: Any, node_prefix: str = NODE_PREFIX) -> None:
    """Appends the (prefixed) ids of the steps which the given source(s) depend on.\n
    i.e. 'step1/out' depends on step1, but 'workflow_input' does not depend on any step.

    Args:
        dependencies (List[str]): The list to which the dependencies are (mutably) appended
        sources (Any): The source: of a step input or the outputSource: of a workflow output.\n
        Either a string or a list of strings.
        node_prefix (str): Prepended to each step id
    """
    if sources is None:
        return
    if isinstance(sources, str):
        sources = [sources]
    if not isinstance(sources, List):
        return
    for source in sources:
        if not isinstance(source, str):
            continue
        split = source.split('/')
        if len(split) > 1:
            dependencies.append(node_prefix + split[0].replace('#', '', 1))


def get_steps(workflow: Cwl, path: Optional[str] = None) -> Dict[str, Yaml]:
    """Normalizes the steps: of a workflow (either a list or a map) into an ordered map keyed by step id

    Args:
        workflow (Cwl): An expanded CWL Workflow
        path (Optional[str]): The file the workflow came from, only used for error reporting.

    Raises:
        CwlParseError: If a step in list form does not have an id

    Returns:
        Dict[str, Yaml]: The steps, keyed by step id
    """
    steps = workflow.get('steps')
    steps_dict: Dict[str, Yaml] = {}
    if isinstance(steps, Dict):
        for key, step in steps.items():
            steps_dict[str(key)] = step if isinstance(step, Dict) else {}
    elif isinstance(steps, List):
        for step in steps:
            if not isinstance(step, Dict) or step.get('id') is None:
                message = CWL_PARSE_ERROR + f'workflow step without an id: {step}'
                logger.error(message)
                raise CwlParseError(message, path)
            # Packed workflows use ids of the form #step
            steps_dict[str(step['id']).lstrip('#')] = step
    else:
        logger.error('Could not find any steps for the workflow.')
    return steps_dict


class WorkflowWalker():
    """Recursively walks the steps of an expanded CWL Workflow, collecting the
    dependencies between the top-level steps (for the DAG) and the docker image
    of every step at every depth (for the tool table).

    A WorkflowWalker instance accumulates results, so use one per root workflow.
    """

    def __init__(self, preprocessor: Preprocessor, mode: OutputMode = OutputMode.DAG,
                 tool_lookup: Optional[docker.ToolLookup] = None) -> None:
        self.preprocessor = preprocessor
        self.mode = mode
        self.tool_lookup = tool_lookup
        self.result = WalkResult({}, {}, {}, [])

    def walk(self, workflow: Cwl, default_docker_path: Optional[str] = None,
             depth: int = 0, parent_step_id: Optional[StepId] = None) -> WalkResult:
        """Walks the steps of the given workflow, and recursively its subworkflows.

        Args:
            workflow (Cwl): An expanded CWL Workflow
            default_docker_path (Optional[str]): The docker image inherited from the parent step, if any
            depth (int): The subworkflow depth. Dependencies are only collected at depth 0.
            parent_step_id (Optional[StepId]): The id of the step which runs workflow, if any

        Raises:
            UnhandledRunTargetError: If the run: of a step is not an entry (or a string)

        Returns:
            WalkResult: The accumulated results (for all calls to walk)
        """
        workflow_docker_path = get_requirement_or_hint(workflow, default_docker_path)

        workflow_path = self.preprocessor.get_path(workflow.get('id'))
        for step_key, step in get_steps(workflow, workflow_path).items():
            if parent_step_id is None:
                step_id = NODE_PREFIX + step_key
            else:
                # Prefix the ids of subworkflow steps with the parent step id and a period.
                step_id = f'{parent_step_id}.{step_key}'

            if depth == 0:
                self.add_step_dependencies(step_id, step)

            step_docker_path = get_requirement_or_hint(step, workflow_docker_path)

            run = step.get('run')
            current_path: Optional[str]
            if isinstance(run, Dict):
                entry_type = classifier.classify(run)
                if entry_type is None:
                    message = CWL_PARSE_SECONDARY_ERROR + str(run)
                    logger.error(message)
                    raise UnhandledRunTargetError(message, workflow_path)
                step_docker_path = get_requirement_or_hint(run, step_docker_path)
                self.result.step_to_type[step_id] = classifier.RUN_TARGET_TYPES[entry_type]
                if entry_type == EntryType.WORKFLOW:
                    self.walk(run, step_docker_path, depth + 1, step_id)
                current_path = self.preprocessor.get_path(run.get('id'))
            elif isinstance(run, str):
                # i.e. run: points to a file which does not exist
                self.result.step_to_type[step_id] = RunTargetType.NOT_APPLICABLE
                current_path = run
            else:
                message = CWL_PARSE_SECONDARY_ERROR + str(run)
                logger.error(message)
                raise UnhandledRunTargetError(message, workflow_path)

            docker_info = self.get_docker_info(step_id, current_path or '', step_docker_path)

            if depth == 0 and self.mode == OutputMode.DAG:
                self.result.node_pairs.append((step_id, docker_info.docker_url))

            self.result.node_docker_info[step_id] = docker_info

        return self.result

    def add_step_dependencies(self, step_id: StepId, step: Yaml) -> None:
        step_dependencies: List[str] = []
        for step_input in as_list(step.get('in'), 'id', 'source'):
            if isinstance(step_input, Dict):
                process_dependencies(step_dependencies, step_input.get('source'))
        if step_dependencies:
            tool_info = self.result.tool_info.setdefault(step_id, ToolInfo(None, []))
            tool_info.dependency_ids.extend(step_dependencies)

    def get_docker_info(self, step_id: StepId, run_path: str, docker_path: Optional[str]) -> DockerInfo:
        """Classifies the docker image of a step. Anomalies are absorbed (i.e. the specifier
        and url are None) so that one bad step does not prevent walking the rest of the workflow.
        """
        specifier: Optional[DockerSpecifier] = None
        docker_url: Optional[str] = None
        step_type = self.result.step_to_type[step_id]
        if step_type in (RunTargetType.WORKFLOW, RunTargetType.TOOL) and docker_path:
            try:
                # CWL does not support parameterized docker pulls, so this is always a literal.
                specifier = docker.determine_image_specifier(docker_path)
                docker_url = docker.get_url_from_entry(docker_path, specifier, self.tool_lookup)
            except Exception as ex:  # pylint: disable=broad-exception-caught
                logger.warning(f'Could not classify docker image {docker_path} of step {step_id}: {ex}')
                specifier = None
                docker_url = None
        return DockerInfo(run_path, docker_path, docker_url, specifier)
