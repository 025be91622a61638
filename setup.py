"""Install the apkgate service."""

from setuptools import setup, find_packages

setup(
    name='apkgate',
    version='0.1.0',
    packages=find_packages(exclude=['tests', '*test*']),
    install_requires=[
        "flask",
        "requests",
        "python-json-logger"
    ],
    extras_require={
        "test": ["pytest"]
    },
    zip_safe=False
)
