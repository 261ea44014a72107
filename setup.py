# SPDX-FileCopyrightText: 2026 diarylock contributors
# SPDX-License-Identifier: MIT

from setuptools import find_namespace_packages, setup

setup(
    name="diarylock",
    version="0.1.0",
    description="diarylock: PIN lock with auto-lock for a personal diary app",
    author="diarylock contributors",
    license="MIT",
    packages=find_namespace_packages(include=["applock", "applock.*", "audit", "audit.*"]),
    python_requires=">=3.8",
    install_requires=[
        "click<9.0,>=8.1",
        "cryptography>=38.0.4",
        "filelock>=3.13.0",
    ],
    extras_require={
        "test": [
            # тестирование
            "pytest>=8.0.0",
            "pytest-cov>=5.0.0",
            "pytest-timeout>=2.3.0",
            "hypothesis>=6.0.0",
        ],
        "dev": [
            # линтеры и форматтеры
            "ruff>=0.2.0",
            "black>=23.1.0",
            "isort>=5.10.1",
            "mypy>=1.8.0",
            "bandit>=1.7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "diarylock=applock.cli:main",
        ],
    },
)
