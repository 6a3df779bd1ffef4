from setuptools import setup, find_packages

setup(
    name='liveconfig',
    version='0.1.0',
    description='Thread-safe, hot-reloadable typed configuration store backed by YAML/JSON files.',
    author='',
    author_email='',
    url='',
    packages=find_packages(include=['liveconfig', 'liveconfig.*']),
    install_requires=[
        'omegaconf>=2.1',
        'PyYAML',
        'watchdog>=2.1',
    ],
    extras_require={
        'dev': [
            'pytest>=7.0.0',
        ],
    },
    classifiers=[
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
    ],
    python_requires='>=3.8',
)
