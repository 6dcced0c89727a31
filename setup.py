# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="monolinker",
    version="0.1.0",
    description="Links the local projects of a JavaScript monorepo against the output of an installation backend",
    packages=find_namespace_packages(where="src", include=["monolinker", "monolinker.*"]),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'monolinker=monolinker.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
