from pathlib import Path

from setuptools import find_packages, setup

setup(
    name="pixel_marker",
    version=Path("./pixel_marker/VERSION").read_text().strip(),
    packages=find_packages(include=["pixel_marker", "pixel_marker.*"]),
    package_data={"pixel_marker": ["VERSION"]},
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "opencv-python",
        "matplotlib",
        "easydict",
        "tqdm",
    ],
    extras_require={
        "web": ["fastapi", "uvicorn", "python-multipart"],
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["pixel_marker=pixel_marker.cli:main"],
    },
)
