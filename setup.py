from setuptools import setup, find_packages
import os

ROOT_DIR = os.path.dirname(os.path.abspath(__file__))


def find_version():
    path_to_version = os.path.join(ROOT_DIR, "tracequery", "VERSION")
    with open(path_to_version, "r", encoding="utf-8") as f:
        return f.read().strip()


with open(os.path.join(ROOT_DIR, "README.rst"), "r", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="tracequery",
    version=find_version(),
    description="tracequery - compound anatomical search over neuron reconstructions",
    long_description=long_description,
    long_description_content_type="text/x-rst",
    packages=find_packages(include=["tracequery", "tracequery.*"]),
    include_package_data=True,
    package_data={
        'tracequery': [
            'VERSION',
        ]
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
        "Intended Audience :: Developers",
    ],
    python_requires=">=3.9",
    install_requires=[
        "anytree",
        "numpy",
        "pandas",
        "nibabel",
        "pynrrd",
        "tqdm",
        "click",
    ],
    extras_require={
        "test": ["pytest", "parameterized"],
    },
    entry_points={
        "console_scripts": [
            "tracequery = tracequery.cli:main",
        ],
    },
)
