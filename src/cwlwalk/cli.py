import argparse
from pathlib import Path

from . import __version__

parser = argparse.ArgumentParser(prog='cwlwalk',
                                 description='Expand a CWL workflow and print its step DAG, tool table, or metadata.')
parser.add_argument('--root', type=str, required=True,
                    help='The root (i.e. primary) CWL descriptor')
parser.add_argument('--dir', type=str, required=False,
                    help='The root directory of the repository. Defaults to the directory of --root')
parser.add_argument('--mode', type=str, required=False, default='dag', choices=['dag', 'tools', 'metadata', 'imports'],
                    help='dag: the step dependency graph (cytoscape json), tools: the tool table, metadata: the description and author, imports: the referenced files')
parser.add_argument('--config_file', type=str, required=False, default=str(Path().home()/'cwlwalk'/'config.json'),
                    help='User provided (JSON) config file')
# version action exits the parser
parser.add_argument('--version', action='version', version=__version__,
                    default='==SUPPRESS==', help='Current version of cwlwalk')
parser.add_argument('--max_depth', type=int, required=False,
                    help='Overrides the maximum file depth of the config file')
parser.add_argument('--max_char_count', type=int, required=False,
                    help='Overrides the maximum number of characters loaded of the config file')
parser.add_argument('--max_file_count', type=int, required=False,
                    help='Overrides the maximum number of files loaded of the config file')
parser.add_argument('--graphviz', type=str, required=False,
                    help='Also write the DAG to the given file in the graphviz dot format. Only used with --mode dag')
parser.add_argument('--quiet', default=False, action="store_true",
                    help='Disable verbose output. Only print warnings and errors.')
