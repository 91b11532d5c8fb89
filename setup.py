from setuptools import setup, find_packages
import os

setup(
    name="BILAYERtools",
    version="0.1.0",
    author="BILAYERtools developers",
    description="A toolkit (JIT compiled) for Fourier spectra of lipid bilayer height, thickness and tilt fluctuations",
    long_description=open("README.md").read() if os.path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(include=["BILAYERtools", "BILAYERtools.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: Scientific/Engineering :: Physics",
        "Topic :: Scientific/Engineering :: Chemistry",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
    install_requires=[
        # Core scientific computing dependencies
        "numpy>=1.20.0",
        # JIT compilation and parallelization
        "numba>=0.56.0",
        "joblib>=1.0.0",
        # File I/O and data handling
        "h5py>=3.0.0",
    ],
    extras_require={
        # Fast FFT library (recommended for best performance)
        "fftw": [
            "pyfftw>=0.12.0",
        ],
        # Test runner
        "test": [
            "pytest>=7.0",
        ],
        # Complete installation with all optional features
        "all": [
            "numpy>=1.20.0",
            "h5py>=3.0.0",
            "pyfftw>=0.12.0",
            "numba>=0.56.0",
            "joblib>=1.0.0",
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "bilayer-spectra=BILAYERtools.spectra_cli:main",
        ],
    },
    zip_safe=False,
)
