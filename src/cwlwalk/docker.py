"""Classifies docker image references (i.e. the dockerPull: field of a DockerRequirement)
and builds links to the registries which host them. No network requests are made here;
whether an image is registered with the service is an external capability (ToolLookup).
"""
import re
from typing import Callable, Optional

from .cwlwalk_types import DockerImageReference, DockerSpecifier, Registry

# Given the path of a docker image without a specifier, i.e. quay.io/foo/bar,
# returns True if there is a registered tool with that path.
ToolLookup = Callable[[str], bool]

DOCKSTORE_PATH = 'https://www.dockstore.org/containers/'
QUAY_IO_PATH = 'https://quay.io/repository/'
DOCKER_HUB_PATH_R = 'https://hub.docker.com/r/'  # For repo/subrepo:tag
DOCKER_HUB_PATH_UNDERSCORE = 'https://hub.docker.com/_/'  # For repo:tag
GITHUB_CONTAINER_REGISTRY_PATH = 'https://ghcr.io/'
AMAZON_ECR_PATH = 'https://gallery.ecr.aws/'

PRIVATE_ECR_PATTERN = re.compile(r'^[0-9]{12}\.dkr\.ecr\.[a-z0-9-]+\.amazonaws\.com/')
SEVEN_BRIDGES_PATTERN = re.compile(r'^([a-z0-9-]+-)?images\.sbgenomics\.com/')


def _split_digest(image: str) -> str:
    return image.split('@', 1)[0]


def _split_tag(image: str) -> Optional[str]:
    """Returns the tag of an image without a digest, or None. Note that the registry
    host may contain a port (localhost:5000/foo), so only the last path segment is checked.
    """
    last_segment = image.rsplit('/', 1)[-1]
    if ':' not in last_segment:
        return None
    return last_segment.split(':', 1)[1]


def determine_image_specifier(image: str,
                              reference: DockerImageReference = DockerImageReference.LITERAL) -> DockerSpecifier:
    """Determines how a docker image reference names a version of the image

    Args:
        image (str): A docker image reference, i.e. quay.io/foo/bar:1.0
        reference (DockerImageReference): Whether image is a literal or a parameter.\n
        CWL does not support parameterized docker pulls, but other languages do.

    Returns:
        DockerSpecifier: NO_TAG, LATEST, TAG, DIGEST, or PARAMETER
    """
    if reference == DockerImageReference.DYNAMIC:
        return DockerSpecifier.PARAMETER
    if '@' in image:
        return DockerSpecifier.DIGEST
    tag = _split_tag(image)
    if not tag:
        return DockerSpecifier.NO_TAG
    if tag == 'latest':
        return DockerSpecifier.LATEST
    return DockerSpecifier.TAG


def get_image_name_without_specifier(image: str, specifier: DockerSpecifier) -> str:
    if specifier == DockerSpecifier.DIGEST:
        image = _split_digest(image)
    if specifier in (DockerSpecifier.TAG, DockerSpecifier.LATEST, DockerSpecifier.DIGEST):
        tag = _split_tag(image)
        if tag is not None:
            image = image[:-(len(tag) + 1)]
    return image


def get_specifier_name(image: str, specifier: DockerSpecifier) -> str:
    """Returns the tag (i.e. 1.0) or digest (i.e. sha256:abc) of an image, or '' """
    if specifier == DockerSpecifier.DIGEST:
        return image.split('@', 1)[1]
    if specifier in (DockerSpecifier.TAG, DockerSpecifier.LATEST):
        return _split_tag(image) or ''
    return ''


def is_amazon_ecr(image: str) -> bool:
    return image.startswith(Registry.AMAZON_ECR.value + '/') or PRIVATE_ECR_PATTERN.match(image) is not None


def has_registry_host(image: str) -> bool:
    """Docker Hub images never start with a host, i.e. foo/bar, whereas
    i.e. gcr.io/foo/bar and localhost:5000/foo do.
    """
    if '/' not in image:
        return False
    first = image.split('/', 1)[0]
    return '.' in first or ':' in first or first == 'localhost'


def determine_image_registry(image: str) -> Optional[Registry]:
    """Determines which supported registry hosts the given image.

    Args:
        image (str): A docker image reference

    Returns:
        Optional[Registry]: The registry, or None if the registry is not supported\n
        (i.e. gcr.io) or if a Docker Hub image does not specify a version.
    """
    if image.startswith(Registry.QUAY_IO.value + '/'):
        return Registry.QUAY_IO
    if image.startswith(Registry.GITHUB_CONTAINER_REGISTRY.value + '/'):
        return Registry.GITHUB_CONTAINER_REGISTRY
    if is_amazon_ecr(image):
        return Registry.AMAZON_ECR
    if SEVEN_BRIDGES_PATTERN.match(image):
        return Registry.SEVEN_BRIDGES
    if has_registry_host(image):
        return None
    if determine_image_specifier(image) == DockerSpecifier.NO_TAG:
        return None
    return Registry.DOCKER_HUB


def get_repository_name(registry: Registry, image: str, specifier: DockerSpecifier) -> str:
    """Returns the name of the repository of the image within the given registry

    Args:
        registry (Registry): The registry which hosts the image
        image (str): A docker image reference
        specifier (DockerSpecifier): The specifier of image

    Returns:
        str: i.e. library/ubuntu for ubuntu:20.04, or foo/bar for quay.io/foo/bar:1
    """
    name = get_image_name_without_specifier(image, specifier)
    if registry == Registry.DOCKER_HUB:
        return name if '/' in name else f'library/{name}'
    if registry == Registry.AMAZON_ECR and PRIVATE_ECR_PATTERN.match(name):
        # The repository of a private ECR image includes the host
        return name
    prefix = registry.value + '/'
    if name.startswith(prefix):
        return name[len(prefix):]
    return name.split('/', 1)[1] if '/' in name else name


def get_url_from_entry(image: Optional[str], specifier: Optional[DockerSpecifier] = None,
                       tool_lookup: Optional[ToolLookup] = None) -> Optional[str]:
    """Returns a link for the given docker image: either to the registered tool, or
    (if there is no such tool) to the page of the image in its registry.

    Args:
        image (Optional[str]): A docker image reference
        specifier (Optional[DockerSpecifier]): The specifier of image. Computed if not given.
        tool_lookup (Optional[ToolLookup]): Reports whether an image is a registered tool.

    Returns:
        Optional[str]: The url, or None if image is empty or hosted by an unsupported registry
    """
    if not image:
        return None
    if specifier is None:
        specifier = determine_image_specifier(image)
    if specifier == DockerSpecifier.PARAMETER:
        return None

    def is_registered(path: str) -> bool:
        return tool_lookup is not None and tool_lookup(path)

    name = get_image_name_without_specifier(image, specifier)

    if SEVEN_BRIDGES_PATTERN.match(name):
        return f'https://{name}'
    if name.startswith(Registry.QUAY_IO.value + '/'):
        if is_registered(name):
            return DOCKSTORE_PATH + name
        return QUAY_IO_PATH + get_repository_name(Registry.QUAY_IO, name, DockerSpecifier.NO_TAG)
    if name.startswith(Registry.GITHUB_CONTAINER_REGISTRY.value + '/'):
        if is_registered(name):
            return DOCKSTORE_PATH + name
        return GITHUB_CONTAINER_REGISTRY_PATH + get_repository_name(Registry.GITHUB_CONTAINER_REGISTRY, name,
                                                                    DockerSpecifier.NO_TAG)
    if is_amazon_ecr(name):
        if is_registered(name):
            return DOCKSTORE_PATH + name
        if PRIVATE_ECR_PATTERN.match(name):
            return f'https://{name}'
        return AMAZON_ECR_PATH + get_repository_name(Registry.AMAZON_ECR, name, DockerSpecifier.NO_TAG)
    if has_registry_host(name):
        return None

    # Docker Hub
    if '/' not in name:
        return DOCKER_HUB_PATH_UNDERSCORE + name
    dockstore_name = f'{Registry.DOCKER_HUB.value}/{name}'
    if is_registered(dockstore_name):
        return DOCKSTORE_PATH + dockstore_name
    return DOCKER_HUB_PATH_R + name
