"""Setup configuration for the puzzle-maker package."""

from setuptools import find_packages, setup

setup(
    name="puzzle-maker",
    version="0.1.0",
    packages=find_packages(include=["puzzle_maker", "puzzle_maker.*"]),
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "pillow",
        "pydantic>=2",
        "pydantic-settings",
    ],
    extras_require={
        "dev": [
            "pytest",
            "pytest-cov",
            "black",
            "flake8",
            "mypy",
            "isort",
        ],
    },
)
