from setuptools import setup

import re

vrx = r"""^__version__ *= *['"]([^'"]+)['"]"""
src = open("pricegen/__init__.py").read()
ver = re.search(vrx, src, re.M).group(1)

ldesc = open("README.rst").read().strip()
sdesc = ldesc.split('\n')[0].split(' - ')[1].strip()


setup(
    name="pricegen",
    version=ver,
    description=sdesc,
    long_description=ldesc,
    packages=["pricegen"],
    install_requires=["boto3"],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["pricegen=pricegen.run:main"]},
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: ISC License (ISCL)",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Topic :: Software Development :: Code Generators",
    ]
)
