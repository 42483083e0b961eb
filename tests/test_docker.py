import unittest

import pytest

from cwlwalk import docker
from cwlwalk.cwlwalk_types import DockerImageReference, DockerSpecifier, Registry

PRIVATE_ECR = '012345678912.dkr.ecr.us-east-1.amazonaws.com'
DOCKSTORE = 'https://www.dockstore.org/containers/'


class TestDocker(unittest.TestCase):

    @pytest.mark.fast
    def test_determine_image_registry(self) -> None:
        self.assertEqual(Registry.DOCKER_HUB, docker.determine_image_registry('python:2.7'))
        self.assertEqual(Registry.DOCKER_HUB, docker.determine_image_registry('debian:jessie'))
        self.assertEqual(Registry.DOCKER_HUB,
                         docker.determine_image_registry('knowengdev/data_cleanup_pipeline:07_11_2017'))
        # No version
        self.assertIsNone(docker.determine_image_registry('knowengdev/data_cleanup_pipeline'))
        self.assertIsNone(docker.determine_image_registry('python:'))
        self.assertEqual(Registry.AMAZON_ECR,
                         docker.determine_image_registry('137112412989.dkr.ecr.us-east-1.amazonaws.com/amazonlinux:latest'))
        self.assertEqual(Registry.AMAZON_ECR, docker.determine_image_registry('public.ecr.aws/ubuntu/ubuntu:latest'))
        # Google is not supported
        self.assertIsNone(docker.determine_image_registry('gcr.io/project-id/image:tag'))
        self.assertEqual(Registry.QUAY_IO, docker.determine_image_registry('quay.io/ucsc_cgl/verifybamid:1.30.0'))
        self.assertEqual(Registry.GITHUB_CONTAINER_REGISTRY, docker.determine_image_registry('ghcr.io/foo/bar:1'))
        self.assertEqual(Registry.SEVEN_BRIDGES, docker.determine_image_registry('images.sbgenomics.com/foo/bar:1'))
        self.assertEqual(Registry.SEVEN_BRIDGES, docker.determine_image_registry('cgc-images.sbgenomics.com/foo/bar'))

    @pytest.mark.fast
    def test_determine_image_specifier(self) -> None:
        self.assertEqual(DockerSpecifier.NO_TAG, docker.determine_image_specifier('quay.io/ucsc_cgl/verifybamid'))
        self.assertEqual(DockerSpecifier.LATEST, docker.determine_image_specifier('quay.io/ucsc_cgl/verifybamid:latest'))
        self.assertEqual(DockerSpecifier.TAG, docker.determine_image_specifier('quay.io/ucsc_cgl/verifybamid:1.30.0'))
        self.assertEqual(DockerSpecifier.DIGEST, docker.determine_image_specifier(
            'quay.io/ucsc_cgl/verifybamid@sha256:05442f015018fb6a315b666f80d205e9ac066b3c53a217d5f791d22831ae98ac'))
        self.assertEqual(DockerSpecifier.PARAMETER,
                         docker.determine_image_specifier('docker_image', DockerImageReference.DYNAMIC))
        # The port of a registry host is not a tag
        self.assertEqual(DockerSpecifier.NO_TAG, docker.determine_image_specifier('localhost:5000/foo'))
        self.assertEqual(DockerSpecifier.TAG, docker.determine_image_specifier('localhost:5000/foo:1'))

    @pytest.mark.fast
    def test_get_image_name_without_specifier(self) -> None:
        self.assertEqual('foo/bar', docker.get_image_name_without_specifier('foo/bar', DockerSpecifier.NO_TAG))
        self.assertEqual('foo/bar', docker.get_image_name_without_specifier('foo/bar:1', DockerSpecifier.TAG))
        self.assertEqual('foo/bar', docker.get_image_name_without_specifier('foo/bar@sha256:123456789abc',
                                                                            DockerSpecifier.DIGEST))
        self.assertEqual('quay.io/foo/bar', docker.get_image_name_without_specifier('quay.io/foo/bar:1',
                                                                                    DockerSpecifier.TAG))
        self.assertEqual('ghcr.io/foo/bar', docker.get_image_name_without_specifier(
            'ghcr.io/foo/bar:1@sha256:123456789abc', DockerSpecifier.DIGEST))
        self.assertEqual('public.ecr.aws/foo/bar', docker.get_image_name_without_specifier(
            'public.ecr.aws/foo/bar@sha256:123456789abc', DockerSpecifier.DIGEST))

    @pytest.mark.fast
    def test_get_repository_name(self) -> None:
        self.assertEqual('foo/bar', docker.get_repository_name(Registry.QUAY_IO, 'quay.io/foo/bar:1',
                                                               DockerSpecifier.TAG))
        self.assertEqual('foo/bar', docker.get_repository_name(Registry.QUAY_IO, 'quay.io/foo/bar@sha256:123456789abc',
                                                               DockerSpecifier.DIGEST))

        self.assertEqual('library/foo', docker.get_repository_name(Registry.DOCKER_HUB, 'foo:1', DockerSpecifier.TAG))
        self.assertEqual('foo/bar', docker.get_repository_name(Registry.DOCKER_HUB, 'foo/bar:1', DockerSpecifier.TAG))
        self.assertEqual('foo/bar', docker.get_repository_name(Registry.DOCKER_HUB, 'foo/bar@sha256:123456789abc',
                                                               DockerSpecifier.DIGEST))

        ghcr = Registry.GITHUB_CONTAINER_REGISTRY
        self.assertEqual('foo/bar', docker.get_repository_name(ghcr, 'ghcr.io/foo/bar:1', DockerSpecifier.TAG))
        self.assertEqual('foo/bar/test', docker.get_repository_name(ghcr, 'ghcr.io/foo/bar/test:1', DockerSpecifier.TAG))
        self.assertEqual('foo/bar', docker.get_repository_name(ghcr, 'ghcr.io/foo/bar@sha256:123456789abc',
                                                               DockerSpecifier.DIGEST))
        self.assertEqual('foo/bar', docker.get_repository_name(ghcr, 'ghcr.io/foo/bar:1@sha256:123456789abc',
                                                               DockerSpecifier.DIGEST))

        ecr = Registry.AMAZON_ECR
        self.assertEqual('foo/bar', docker.get_repository_name(ecr, 'public.ecr.aws/foo/bar:1', DockerSpecifier.TAG))
        self.assertEqual('foo/bar/test', docker.get_repository_name(ecr, 'public.ecr.aws/foo/bar/test:1',
                                                                    DockerSpecifier.TAG))
        self.assertEqual('foo/bar', docker.get_repository_name(ecr, 'public.ecr.aws/foo/bar@sha256:123456789abc',
                                                               DockerSpecifier.DIGEST))
        self.assertEqual(f'{PRIVATE_ECR}/foo/bar', docker.get_repository_name(ecr, f'{PRIVATE_ECR}/foo/bar:1',
                                                                              DockerSpecifier.TAG))
        self.assertEqual(f'{PRIVATE_ECR}/foo/bar', docker.get_repository_name(
            ecr, f'{PRIVATE_ECR}/foo/bar@sha256:123456789abc', DockerSpecifier.DIGEST))

    @pytest.mark.fast
    def test_get_specifier_name(self) -> None:
        self.assertEqual('', docker.get_specifier_name('foo/bar', DockerSpecifier.NO_TAG))
        self.assertEqual('1', docker.get_specifier_name('foo/bar:1', DockerSpecifier.TAG))
        self.assertEqual('sha256:123456789abc', docker.get_specifier_name('foo@sha256:123456789abc',
                                                                          DockerSpecifier.DIGEST))
        self.assertEqual('sha256:123456789abc', docker.get_specifier_name('ghcr.io/foo/bar/test@sha256:123456789abc',
                                                                          DockerSpecifier.DIGEST))
        self.assertEqual('sha256:123456789abc', docker.get_specifier_name(
            'ghcr.io/foo/bar/test:1@sha256:123456789abc', DockerSpecifier.DIGEST))

    @pytest.mark.fast
    def test_url_from_entry_unregistered(self) -> None:
        url = docker.get_url_from_entry
        self.assertIsNone(url(''))
        self.assertEqual('https://images.sbgenomics.com/foo/bar',
                         url('images.sbgenomics.com/foo/bar', DockerSpecifier.NO_TAG))
        self.assertEqual('https://images.sbgenomics.com/foo/bar',
                         url('images.sbgenomics.com/foo/bar:1', DockerSpecifier.TAG))

        self.assertEqual('https://hub.docker.com/_/foo', url('foo', DockerSpecifier.NO_TAG))
        self.assertEqual('https://hub.docker.com/_/foo', url('foo:1', DockerSpecifier.TAG))
        self.assertEqual('https://hub.docker.com/r/foo/bar', url('foo/bar', DockerSpecifier.NO_TAG))
        self.assertEqual('https://hub.docker.com/r/foo/bar', url('foo/bar:1', DockerSpecifier.TAG))

        self.assertEqual('https://gallery.ecr.aws/foo/bar/test', url('public.ecr.aws/foo/bar/test', DockerSpecifier.NO_TAG))
        self.assertEqual('https://gallery.ecr.aws/foo/bar', url('public.ecr.aws/foo/bar:1', DockerSpecifier.TAG))
        self.assertEqual('https://gallery.ecr.aws/foo/bar',
                         url('public.ecr.aws/foo/bar@sha256:123456789abc', DockerSpecifier.DIGEST))
        self.assertEqual(f'https://{PRIVATE_ECR}/foo/bar', url(f'{PRIVATE_ECR}/foo/bar', DockerSpecifier.NO_TAG))
        self.assertEqual(f'https://{PRIVATE_ECR}/foo', url(f'{PRIVATE_ECR}/foo:1', DockerSpecifier.TAG))
        self.assertEqual(f'https://{PRIVATE_ECR}/foo', url(f'{PRIVATE_ECR}/foo@sha256:123456789abc',
                                                           DockerSpecifier.DIGEST))

        self.assertEqual('https://ghcr.io/foo/bar', url('ghcr.io/foo/bar', DockerSpecifier.NO_TAG))
        self.assertEqual('https://ghcr.io/foo/bar', url('ghcr.io/foo/bar:1', DockerSpecifier.TAG))
        self.assertEqual('https://ghcr.io/foo/bar', url('ghcr.io/foo/bar@sha256:123456789abc', DockerSpecifier.DIGEST))
        self.assertEqual('https://ghcr.io/foo/bar', url('ghcr.io/foo/bar:1@sha256:123456789abc', DockerSpecifier.DIGEST))

        self.assertEqual('https://quay.io/repository/foo/bar', url('quay.io/foo/bar', DockerSpecifier.NO_TAG))
        self.assertEqual('https://quay.io/repository/foo/bar', url('quay.io/foo/bar:1', DockerSpecifier.TAG))

        # Unsupported registries, and parameters
        self.assertIsNone(url('gcr.io/project-id/image:tag'))
        self.assertIsNone(url('docker_image', DockerSpecifier.PARAMETER))

    @pytest.mark.fast
    def test_url_from_entry_computes_specifier(self) -> None:
        self.assertEqual('https://quay.io/repository/foo/bar', docker.get_url_from_entry('quay.io/foo/bar:1'))
        self.assertEqual('https://hub.docker.com/_/ubuntu', docker.get_url_from_entry('ubuntu:20.04'))

    @pytest.mark.fast
    def test_url_from_entry_registered(self) -> None:
        registered = set()

        def tool_lookup(path: str) -> bool:
            registered.add(path)
            return True

        url = docker.get_url_from_entry
        self.assertEqual(DOCKSTORE + 'quay.io/foo/bar', url('quay.io/foo/bar', DockerSpecifier.NO_TAG, tool_lookup))
        self.assertEqual(DOCKSTORE + 'quay.io/foo/bar', url('quay.io/foo/bar:1', DockerSpecifier.TAG, tool_lookup))
        self.assertEqual(DOCKSTORE + 'registry.hub.docker.com/foo/bar',
                         url('foo/bar', DockerSpecifier.NO_TAG, tool_lookup))
        self.assertEqual(DOCKSTORE + 'registry.hub.docker.com/foo/bar',
                         url('foo/bar:1', DockerSpecifier.TAG, tool_lookup))
        self.assertEqual(DOCKSTORE + 'public.ecr.aws/foo/bar',
                         url('public.ecr.aws/foo/bar@sha256:123456789', DockerSpecifier.DIGEST, tool_lookup))
        self.assertEqual(DOCKSTORE + f'{PRIVATE_ECR}/foo', url(f'{PRIVATE_ECR}/foo:1', DockerSpecifier.TAG, tool_lookup))
        self.assertEqual(DOCKSTORE + 'ghcr.io/foo/bar',
                         url('ghcr.io/foo/bar@sha256:123456789abc', DockerSpecifier.DIGEST, tool_lookup))
        # Library images and Seven Bridges images are never registered tools
        self.assertEqual('https://hub.docker.com/_/foo', url('foo:1', DockerSpecifier.TAG, tool_lookup))
        self.assertEqual('https://images.sbgenomics.com/foo/bar',
                         url('images.sbgenomics.com/foo/bar', DockerSpecifier.NO_TAG, tool_lookup))
        self.assertIn('quay.io/foo/bar', registered)
        self.assertIn('registry.hub.docker.com/foo/bar', registered)
