# Sphinx configuration for the ui-task-executor API docs.

import os
import sys

sys.path.insert(0, os.path.abspath('../src'))

from ui_task_executor import __version__  # noqa: E402

project = 'ui-task-executor'
author = 'ui-task-executor contributors'
copyright = f'2026, {author}'
version = '.'.join(__version__.split('.')[:2])
release = __version__

extensions = [
    'sphinx.ext.autodoc',
    'sphinx.ext.napoleon',
    'sphinx.ext.viewcode',
    'sphinx.ext.intersphinx',
    'sphinx_autodoc_typehints',
]

exclude_patterns = ['_build']

html_theme = 'sphinx_rtd_theme'
html_title = f'ui-task-executor {release}'

# Engine and dump models read best in declaration order: status enums first,
# then the records that use them.
autodoc_member_order = 'bysource'
autodoc_default_options = {
    'members': True,
    'show-inheritance': True,
    'exclude-members': 'model_config, model_fields, model_computed_fields',
}
# Executor callables and live handles are typed as Any; keep signatures short.
autodoc_typehints = 'description'
typehints_defaults = 'comma'
autodoc_type_aliases = {
    'TaskSpec': 'ui_task_executor.executor.tasks.TaskSpec',
    'TaskExecutorFn': 'ui_task_executor.executor.tasks.TaskExecutorFn',
}

napoleon_google_docstring = True
napoleon_numpy_docstring = False
napoleon_use_rtype = False

nitpick_ignore = [
    ('py:class', 'asyncio.Future'),
]

intersphinx_mapping = {
    'python': ('https://docs.python.org/3', None),
    'pydantic': ('https://docs.pydantic.dev/latest', None),
}
