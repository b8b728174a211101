"""Dagger CI module for the kube-greeter service.

Runs the unit suite in containers and exercises the service the same way the
cluster does: started with an APP_ENV value and reached over port 8080.
"""

import asyncio

import dagger as dg
from dagger import dag, function, object_type

SERVICE_PORT = 8080


@object_type
class KubeGreeterCi:
    """Containerized test pipeline for kube-greeter using uv.

    This module provides:
    - Unit tests in isolated containers
    - Unit tests across multiple Python versions
    - The greeting service as a bindable Dagger service
    - Smoke and e2e tests against the bound service
    """

    # Base container creation
    @function
    def test_container(
        self, source: dg.Directory, python_version: str = "3.12"
    ) -> dg.Container:
        """Create a base container with uv and source code.

        Args:
            source: Directory containing the source code
            python_version: Python version to use (default: 3.12)

        Returns:
            Container configured with uv and source code
        """
        uv_cache = dag.cache_volume("uv")

        return (
            dag.container()
            .from_(f"ghcr.io/astral-sh/uv:python{python_version}-bookworm-slim")
            .with_mounted_cache("/root/.cache/uv", uv_cache)
            .with_directory("/app", source)
            .with_workdir("/app")
            .with_env_variable("UV_SYSTEM_PYTHON", "1")
        )

    # Unit testing functions
    @function
    async def unit_test(
        self, source: dg.Directory, python_version: str = "3.12"
    ) -> str:
        """Run the unit suite with pytest.

        Args:
            source: Directory containing the source code
            python_version: Python version to use

        Returns:
            Test output from pytest
        """
        return await self.run_test(source, "tests/unit", python_version)

    @function
    async def unit_test_matrix(
        self, source: dg.Directory, versions: str = "3.10,3.11,3.12"
    ) -> str:
        """Run unit tests concurrently on multiple Python versions.

        Args:
            source: Directory containing the source code
            versions: Comma-separated list of Python versions

        Returns:
            Formatted test results for all versions
        """
        version_list = [v.strip() for v in versions.split(",")]

        async def test_version(version: str) -> str:
            try:
                result = await self.unit_test(source, version)
            except dg.ExecError as e:
                return f"Python {version}: FAILED\n{e.stdout}{e.stderr}"
            return f"Python {version}: PASSED\n{result}"

        results = await asyncio.gather(*[test_version(v) for v in version_list])

        output_lines = ["=== MULTI-VERSION TEST RESULTS ===", ""]
        for result in results:
            output_lines.extend([result, "=" * 50, ""])

        return "\n".join(output_lines)

    @function
    async def run_test(
        self, source: dg.Directory, path: str, python_version: str = "3.12"
    ) -> str:
        """Run tests at a specific path.

        Args:
            source: Directory containing the source code
            path: Path to test files or directory
            python_version: Python version to use

        Returns:
            Test output from pytest
        """
        return await (
            self.test_container(source, python_version)
            .with_exec(["uv", "pip", "install", "-e", ".[test]"])
            .with_exec(["pytest", path, "-v", "--tb=short"])
            .stdout()
        )

    # Service-related functions
    @function
    def api_service(
        self,
        source: dg.Directory,
        python_version: str = "3.12",
        app_env: str = "local",
    ) -> dg.Service:
        """Run kube-greeter as a Dagger service.

        The container gets APP_ENV the way the Deployment injects it from
        the ConfigMap, and exposes the fixed service port.

        Args:
            source: Directory containing the service code
            python_version: Python version to use (default: 3.12)
            app_env: Value for the APP_ENV environment variable

        Returns:
            A Dagger service listening on port 8080
        """
        return (
            self.test_container(source, python_version)
            .with_exec(["uv", "pip", "install", "-e", "."])
            .with_env_variable("APP_ENV", app_env)
            .with_exposed_port(SERVICE_PORT)
            .as_service(args=["python", "-m", "kube_greeter"])
        )

    @function
    async def test_api_service(
        self,
        source: dg.Directory,
        python_version: str = "3.12",
        app_env: str = "local",
    ) -> str:
        """Smoke-test the bound service with curl.

        Requests the greeting and an unknown path, reporting status codes
        and bodies.

        Args:
            source: Directory containing the source code
            python_version: Python version to use
            app_env: Value for the APP_ENV environment variable

        Returns:
            Test results showing API responses
        """
        api_svc = self.api_service(source, python_version, app_env)

        test_client = (
            dag.container()
            .from_("alpine:latest")
            .with_exec(["apk", "add", "--no-cache", "curl"])
            .with_service_binding("api", api_svc)
        )

        curl = ["curl", "-s", "-w", "\nHTTP %{http_code}\n"]
        root_response = await test_client.with_exec(
            [*curl, f"http://api:{SERVICE_PORT}/"]
        ).stdout()
        missing_response = await test_client.with_exec(
            [*curl, f"http://api:{SERVICE_PORT}/missing"]
        ).stdout()

        result_lines = [
            "=== API SERVICE TEST RESULTS ===",
            "",
            "Root Endpoint (GET /):",
            root_response,
            "",
            "Unknown Endpoint (GET /missing):",
            missing_response,
        ]

        return "\n".join(result_lines)

    @function
    async def integration_test(
        self,
        source: dg.Directory,
        python_version: str = "3.12",
        app_env: str = "production",
    ) -> str:
        """Run the e2e suite against a live service.

        Args:
            source: Directory containing the source code
            python_version: Python version to use
            app_env: APP_ENV given to the service and expected in its greeting

        Returns:
            Integration test results from pytest
        """
        api_svc = self.api_service(source, python_version, app_env)

        return await (
            self.test_container(source, python_version)
            .with_service_binding("api", api_svc)
            .with_env_variable("API_BASE_URL", f"http://api:{SERVICE_PORT}")
            .with_env_variable("EXPECTED_APP_ENV", app_env)
            .with_exec(["uv", "pip", "install", "-e", ".[test]"])
            .with_exec(["pytest", "tests/e2e", "-v", "--tb=short"])
            .stdout()
        )
