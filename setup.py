from setuptools import setup, find_packages


setup(
    name="asarpack",
    version="0.1",
    packages=find_packages(include=["asarpack", "asarpack.*"]),
    description="Single-file application archives with random-access reads and unpacked side directories.",
    python_requires=">=3.8",
    install_requires=[],
    entry_points={
        "console_scripts": [
            "asarpack=asarpack.cli:main",
        ]
    },
)
