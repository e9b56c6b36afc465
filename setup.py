# setup.py
from setuptools import find_namespace_packages, setup

setup(
    name="stayhub",              # Package name
    version="0.1",               # Version
    packages=find_namespace_packages(include=["app", "app.*", "migration"]),
    install_requires=[           # External dependencies
        "fastapi",
        "uvicorn",
        "python-multipart",
        "pydantic>=2",
        "email-validator",
        "asyncpg",
        "slowapi",
        "google-cloud-storage",
        "Pillow",
        "aiohttp",
        "PyJWT",
        "bcrypt",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
            "httpx",
            "polyfactory",
        ],
    },
    python_requires=">=3.10",
)
