# Configuration file for the Sphinx documentation builder.
#
# For the full list of options see the documentation:
# https://www.sphinx-doc.org/en/master/usage/configuration.html

import os
import sys
import datetime

# -- Path setup --------------------------------------------------------------

sys.path.insert(0, os.path.abspath('..'))

from hacreg.version import __version__ as version
from hacreg.version import __title__, __description__

__author__ = "hacreg developers"

# -- Project information -----------------------------------------------------

project = __title__
author = __author__
copyright = f"{datetime.date.today().year}, {__author__}"

# The full version, including alpha/beta/rc tags
release = version

# -- General configuration ---------------------------------------------------

extensions = [
    'sphinx.ext.autodoc',           # Generate documentation from docstrings
    'sphinx.ext.autosummary',       # Generate summary tables for modules
    'sphinx.ext.viewcode',          # Add links to view source code
    'sphinx.ext.napoleon',          # Google style docstrings
    'sphinx.ext.mathjax',           # Render math via MathJax
    'sphinx.ext.intersphinx',       # Link to other project's documentation
    'sphinx.ext.doctest',           # Run the Examples sections
    'matplotlib.sphinxext.plot_directive',
    'sphinx_copybutton',
]

templates_path = ['_templates']
exclude_patterns = ['_build', 'Thumbs.db', '.DS_Store']
pygments_style = 'sphinx'

# -- Options for autodoc -----------------------------------------------------

autodoc_typehints = 'description'
autoclass_content = 'class'
autodoc_default_options = {
    'members': True,
    'member-order': 'bysource',
    'special-members': '__init__',
    'undoc-members': True,
    'exclude-members': '__weakref__'
}

# -- Options for intersphinx -------------------------------------------------

intersphinx_mapping = {
    'python': ('https://docs.python.org/3', None),
    'numpy': ('https://numpy.org/doc/stable/', None),
    'scipy': ('https://docs.scipy.org/doc/scipy/', None),
    'pandas': ('https://pandas.pydata.org/pandas-docs/stable/', None),
    'matplotlib': ('https://matplotlib.org/stable/', None),
    'statsmodels': ('https://www.statsmodels.org/stable/', None),
    'numba': ('https://numba.readthedocs.io/en/stable/', None),
}

# -- Options for HTML output -------------------------------------------------

html_theme = 'sphinx_rtd_theme'
html_theme_options = {
    'prev_next_buttons_location': 'bottom',
    'collapse_navigation': False,
    'navigation_depth': 4,
}
html_static_path = ['_static']
html_last_updated_fmt = '%b %d, %Y'
htmlhelp_basename = 'hacregdoc'

# -- Options for LaTeX output ------------------------------------------------

latex_documents = [
    ('index', 'hacreg.tex', 'hacreg Documentation', __author__, 'manual'),
]

# -- Napoleon settings -------------------------------------------------------
napoleon_google_docstring = True
napoleon_numpy_docstring = False
napoleon_include_init_with_doc = False
napoleon_use_param = True
napoleon_use_rtype = True

# -- Copybutton configuration ------------------------------------------------
copybutton_prompt_text = r">>> |\.\.\. |\$ "
copybutton_prompt_is_regexp = True


def setup(app):
    app.connect('autodoc-process-docstring', process_docstrings)
    app.add_config_value('package_version', version, 'env')


def process_docstrings(app, what, name, obj, options, lines):
    """Note Numba compilation on the compiled bootstrap kernels."""
    if what == 'function' and getattr(obj, '__module__', '').endswith('_numba_core'):
        lines.append('')
        lines.append('.. note::')
        lines.append('   This function is compiled with Numba in nopython mode.')
        lines.append('')
