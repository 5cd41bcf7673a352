"""Setup script for the mlpnet package."""
from setuptools import setup, find_packages
from pathlib import Path

# Read the README file
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

setup(
    name="mlpnet",
    version="1.0.0",
    description="A from-scratch feed-forward neural network toolkit with hand-derived gradients, built on NumPy",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["examples", "examples.*", "tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Education",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Scientific/Engineering :: Artificial Intelligence",
        "Topic :: Education",
    ],
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.23.0",
        "tqdm>=4.60.0",
        "h5py>=3.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=6.0.0",
            "black>=21.0.0",
            "flake8>=3.8.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "mlpnet=mlpnet.cli:main",
        ],
    },
    keywords="neural-network mlp backpropagation adam numpy education scratch python",
    include_package_data=True,
    zip_safe=False,
)
