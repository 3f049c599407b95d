# setup.py

from setuptools import setup, find_packages

setup(
    name="moving-object-fusion",
    version="0.1.0",
    description="Per-frame fusion of object detections, tracks and 3D localizations into moving objects",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["moving_object_node"],
    install_requires=[
        "numpy>=1.19.0",
        "opencv-python>=4.5.0",
        "pyyaml>=5.1",
        "scipy>=1.5.0",
    ],
    extras_require={
        "test": [
            "pytest>=6.0.0",
            "pytest-cov>=2.12.0",
        ],
        "dev": [
            "pytest>=6.0.0",
            "pytest-cov>=2.12.0",
            "black>=21.5b2",
            "isort>=5.9.1",
            "flake8>=3.9.2",
        ],
    },
    python_requires=">=3.8",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Topic :: Scientific/Engineering :: Artificial Intelligence",
        "Topic :: Scientific/Engineering :: Image Processing",
    ],
    entry_points={
        "console_scripts": [
            "moving-object=moving_object_node:main",
        ],
    },
)
