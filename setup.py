from setuptools import setup
from pathlib import Path

this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text()

setup(name='arm64sim',
      version='1.0.0',
      description='Rewrite arm64 device Mach-O images to load on the simulator.',
      long_description=long_description,
      long_description_content_type='text/markdown',
      python_requires='>=3.8',
      install_requires=['Pygments'],
      extras_require={'test': ['pytest']},
      packages=['simlib', 'sim_macho', 'arm64sim'],
      package_dir={
            'simlib': 'src/simlib',
            'sim_macho': 'src/sim_macho',
            'arm64sim': 'src/arm64sim'
      },
      classifiers=[
            'Programming Language :: Python :: 3',
            'License :: OSI Approved :: MIT License',
            'Operating System :: OS Independent'
      ],
      entry_points={'console_scripts': [
            'arm64sim=arm64sim.arm64sim_script:main'
      ]}
      )
