import setuptools

with open("scfflow/_version.py") as f:
    version = f.readlines()[-1].split()[-1].strip("\"'")

with open('README.rst', 'r') as f:
    long_description = f.read()

description = "scfflow is a Python package computing closed-shell Hartree-Fock energies with a self-consistent field solver, and chaining the resulting orbitals to interchangeable correlated methods (MP2, CCSD) selected at runtime through algorithm registries."

setuptools.setup(
    name="scfflow",
    author="The scfflow developers",
    version=version,
    description=description,
    long_description=long_description,
    long_description_content_type="text/x-rst",
    packages=setuptools.find_packages(include=["scfflow", "scfflow.*"]),
    test_suite="scfflow",
    python_requires=">=3.8",
    install_requires=['numpy', 'h5py', 'openfermion'],
    extras_require={
        'pyscf': ['pyscf'],
        'test': ['pyscf', 'pytest']
    }
)
