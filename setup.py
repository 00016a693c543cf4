from setuptools import setup, find_packages

setup(
    name="fluxos-http",
    version="0.1.0",
    description="Fluent HTTP request builder for fluxos services",
    author="Fluxos Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "httpx>=0.25.1",
        "pydantic>=2.5.0",
        "pydantic-core>=2.14.0",
        "structlog>=23.2.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
        ],
    },
    python_requires=">=3.10",
)
