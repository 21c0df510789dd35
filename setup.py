from setuptools import setup, find_packages

setup(
    name="semantic-composer",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        "semantic_composer": ["data/*", "config.cfg"]
    },
    install_requires=[
        'spacy>=3.0.6', 'thinc>=8.0.0', 'srsly>=2.4.0', 'wasabi>=0.8.2', 'rdflib'],
    extras_require={
        'test': ['pytest']
    }
)
