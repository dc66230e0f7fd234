from setuptools import setup, find_packages

with open('requirements.txt') as f:
    required = f.read().splitlines()

setup(
    name='unleash_agent',
    version='0.1',
    packages=find_packages(exclude=['tests', 'tests.*']),
    description='A belief-and-planning agent for the Unleash The Geek CodinGame contest.',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    python_requires='>=3.8',
    install_requires=required,
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'unleash-agent=unleash_agent.bot:main',
        ],
    },
)
