# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="notetree",
    version="0.1.0",
    description="File and front matter tag trees for a directory of notes",
    python_requires=">=3.9",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["notetree", "notetree.*"]),
    install_requires=[
        "python-frontmatter>=1.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        'console_scripts': [
            'notetree=notetree.interface.cli.app:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
