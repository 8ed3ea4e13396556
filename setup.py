"""tvdenoise package configuration."""

import importlib.util
import os.path
import sys

from setuptools import find_namespace_packages, setup

# Import module tvdenoise._version without executing __init__.py
spec = importlib.util.spec_from_file_location("_version", os.path.join("tvdenoise", "_version.py"))
module = importlib.util.module_from_spec(spec)
sys.modules["_version"] = module
spec.loader.exec_module(module)
from _version import package_version

name = "tvdenoise"
version = package_version()
packages = find_namespace_packages(where="tvdenoise")
packages = ["tvdenoise"] + [f"tvdenoise.{m}" for m in packages]


longdesc = """
tvdenoise is a Python package for total variation (TV) regularized image denoising under Gaussian, Laplace, and Poisson noise models. When the noise standard deviation is known, the fidelity strength is selected automatically by the discrepancy principle, so that the residual of the denoised image matches the noise level. The TV restoration solver is a primal-dual hybrid gradient algorithm built on JAX.
"""

# Set install_requires from requirements.txt file
with open("requirements.txt") as f:
    lines = f.readlines()
install_requires = [line.strip() for line in lines if line.strip()]

python_requires = ">=3.10"
tests_require = ["pytest"]

extras_require = {"tests": tests_require}
with open("dev_requirements.txt") as f:
    lines = f.readlines()
extras_require["dev"] = [line.strip() for line in lines if line.strip() and line[0:2] != "-r"]

setup(
    name=name,
    version=version,
    description="Total variation regularized image denoising with automatic "
    "selection of the fidelity strength",
    long_description=longdesc,
    keywords=[
        "Image Denoising",
        "Total Variation",
        "Discrepancy Principle",
        "Poisson Noise",
        "Laplace Noise",
        "PDHG",
    ],
    platforms="Any",
    license="BSD-3-Clause",
    author="tvdenoise Developers",
    packages=packages,
    include_package_data=True,
    python_requires=python_requires,
    install_requires=install_requires,
    extras_require=extras_require,
    entry_points={
        "console_scripts": [
            "tvdenoise = tvdenoise.cli:main",
            "imnoise = tvdenoise.cli:imnoise_main",
            "imdiff = tvdenoise.cli:imdiff_main",
        ]
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Education",
        "Intended Audience :: Science/Research",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Topic :: Scientific/Engineering :: Image Processing",
        "Topic :: Scientific/Engineering :: Mathematics",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    zip_safe=False,
)
