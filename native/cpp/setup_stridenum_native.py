"""Build the ``stridenum_native`` extension.

Run from the repository root so the module lands next to the ``stridenum``
package::

    python native/cpp/setup_stridenum_native.py build_ext --inplace
"""

import os

from pybind11.setup_helpers import ParallelCompile, Pybind11Extension, build_ext
from setuptools import setup

NATIVE_VERSION = "0.1.0"
SOURCE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "stridenum_native.cpp")

ParallelCompile("STRIDENUM_NATIVE_JOBS").install()

setup(
    name="stridenum_native",
    version=NATIVE_VERSION,
    ext_modules=[
        Pybind11Extension(
            "stridenum_native",
            [os.path.relpath(SOURCE)],
            cxx_std=17,
            define_macros=[("STRIDENUM_NATIVE_VERSION", '"%s"' % NATIVE_VERSION)],
        )
    ],
    cmdclass={"build_ext": build_ext},
    zip_safe=False,
)
