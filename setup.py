from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="rosetta-gateway",
    version="0.1.0",
    author="Rosetta Gateway Team",
    description="Chain agnostic Rosetta Data and Construction API gateway, key library and client",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["rosetta_crypto", "rosetta_server", "rosetta_server.*", "rosetta_client"]),
    include_package_data=True,
    install_requires=[
        "fastapi>=0.100.0",
        "uvicorn>=0.23.0",
        "pydantic>=2.0.0",
        "starlette>=0.27.0",
        "aiohttp>=3.8.0",
        "tenacity>=8.2.0",
        "python-dotenv>=1.0.0",
        "prometheus-client>=0.17.0",
        "requests>=2.25.0",
        "click>=8.0.0",
        "coincurve>=18.0.0",
        "PyNaCl>=1.5.0",
        "py-sr25519-bindings>=0.2.0",
        "mnemonic>=0.20",
        "bech32>=1.2.0",
        "pycryptodome>=3.18.0",
        "base58>=2.1.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "httpx>=0.24.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "rosetta-server=rosetta_server.cli:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    python_requires=">=3.11",
)
