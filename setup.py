"""Setup script for support-desk-sim."""

from setuptools import setup, find_packages

setup(
    name="support-desk-sim",
    version="0.1.0",
    description="A SimPy-based simulation of an IT support desk with shifts and fatigue",
    author="Support Desk Sim",
    license="MIT",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "simpy",
        "numpy",
        "pandas",
        "matplotlib",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "run-simulation=scripts.run_simulation:main",
        ],
    },
)
