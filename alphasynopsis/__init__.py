#!python


__project__ = "alphasynopsis"
__version__ = "0.3.0"
__license__ = "Apache"
__description__ = "Normalization of search engine peptide hits into synopsis files"
__author__ = "Mann Labs"
__author_email__ = "opensource@alphapept.com"
__github__ = "https://github.com/MannLabs/alphasynopsis"
__keywords__ = [
    "bioinformatics",
    "proteomics",
    "AlphaPept ecosystem",
]
__python_version__ = ">=3.10"
__classifiers__ = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "License :: OSI Approved :: Apache Software License",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Topic :: Scientific/Engineering :: Bio-Informatics",
]
__urls__ = {
    "Mann Labs at MPIB": "https://www.biochem.mpg.de/mann",
    "GitHub": __github__,
}
