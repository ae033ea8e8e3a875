"""
Setup script for vigilant.

Vigilant tracks a single user's device usage against a daily budget:

1. Usage Ledger - append-only usage log with a per-day total
2. Adaptive Lockout - locks access once the budget is exceeded
3. Fatigue Advisory - AI-scored fatigue with a short recommendation
4. Emergency SOS - one alert pass to every registered guardian

The 'vigilant' command is the terminal entry point; the REST API is
served with 'vigilant serve'.
"""

from setuptools import find_packages, setup

setup(
    name="vigilant",
    version="1.0.0",
    description="Usage accounting and adaptive lockout engine for digital wellbeing",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="Vigilant",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["config"],
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Database
        "sqlalchemy>=2.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # HTTP
        "httpx>=0.25.0",
        "fastapi>=0.100.0",
        "uvicorn>=0.23.0",
        # AI
        "google-generativeai>=0.5.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "vigilant=src.cli.vigilant_cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords="digital-wellbeing screen-time lockout fatigue cli",
)
