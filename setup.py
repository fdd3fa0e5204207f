"""
Strata — multi-class social policy simulation engine.
Deterministic time-step model of reservation, EWS and cap policy levers.
"""

from setuptools import setup, find_packages

setup(
    name="strata-engine",
    version="1.0.0",
    description="Deterministic multi-class socioeconomic simulation with "
                "reservation, EWS and creamy-layer policy rules.",
    packages=find_packages(include=["strata_engine", "strata_engine.*"]),
    package_data={"strata_engine": ["scenarios.yaml"]},
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.24",
        "pyyaml>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest",
            "pytest-cov",
        ],
    },
    entry_points={
        "console_scripts": [
            "strata-engine=strata_engine.cli:main",
        ],
    },
)
