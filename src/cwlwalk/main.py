import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from . import cli, input_output, utils_graphs
from .cwlwalk_types import OutputMode
from .exceptions import CwlError
from .handler import CwlHandler
from .preprocessor import PreprocessorConfig

logger = logging.getLogger('cwlwalk')


def get_config(config_file: Path, max_depth: Optional[int] = None, max_char_count: Optional[int] = None,
               max_file_count: Optional[int] = None) -> PreprocessorConfig:
    """Reads the config file, then applies the command line overrides (if any)."""
    config = input_output.get_config(config_file)
    overrides = {'max_depth': max_depth, 'max_char_count': max_char_count, 'max_file_count': max_file_count}
    overrides = {key: val for key, val in overrides.items() if val is not None}
    return PreprocessorConfig(**{**config.model_dump(), **overrides})


def main(argv: Optional[List[str]] = None) -> None:
    args = cli.parser.parse_args(argv)
    logging.basicConfig(level=logging.WARNING if args.quiet else logging.INFO,
                        format='%(levelname)s %(name)s: %(message)s')

    config = get_config(Path(args.config_file), args.max_depth, args.max_char_count, args.max_file_count)
    handler = CwlHandler(config)

    root_file = Path(args.root)
    repo_dir = Path(args.dir) if args.dir else root_file.parent
    (root_path, root_content) = input_output.read_root(root_file, repo_dir)
    source_store = input_output.source_store_from_directory(repo_dir)

    output: Any
    try:
        if args.mode == 'metadata':
            output = handler.parse_workflow_content(root_path, root_content, source_store).model_dump()
        elif args.mode == 'imports':
            (found, parsed_information) = handler.process_imports(root_path, root_content, source_store)
            output = {'imports': [source_file.absolute_path for source_file in found], **parsed_information._asdict()}
        elif args.mode == OutputMode.TOOLS.value:
            output = handler.get_content(root_path, root_content, source_store, OutputMode.TOOLS)
        else:
            graph_nx = handler.get_dag(root_path, root_content, source_store)
            output = utils_graphs.dag_to_cytoscape(graph_nx)
            if args.graphviz:
                graph_gv = utils_graphs.dag_to_graphviz(graph_nx, root_file.stem)
                graph_gv.save(args.graphviz)
                logger.info(f'Wrote {args.graphviz}')
    except CwlError as ex:
        logger.error(f'{ex.kind}: {ex}')
        sys.exit(1)

    print(json.dumps(output, indent=2))


if __name__ == '__main__':
    main()
