"""Pages that write and read a session value."""

import logging

from flask import Blueprint, request, session, render_template_string, \
    redirect, url_for, Response

logger = logging.getLogger(__name__)

blueprint = Blueprint('demo', __name__, url_prefix='')

NOT_SET = '[Session Data Not Set]'

SET_VALUE = """<!doctype html>
<form method="post">
  <input type="text" name="TestValue" value="{{ value }}">
  <input type="submit" value="Save">
</form>
"""

READ_VALUE = """<!doctype html>
<span id="TestValue">{{ value }}</span>
"""


@blueprint.route('/SetValue', methods=['GET', 'POST'])
def set_value() -> str:
    """Store the posted ``TestValue`` in the session."""
    if request.method == 'POST':
        session['test'] = request.form.get('TestValue', '')
        logger.debug('Stored test value in session')
    return render_template_string(SET_VALUE, value=session.get('test', ''))


@blueprint.route('/ReadValue', methods=['GET'])
def read_value() -> str:
    """Show the session value, if there is one."""
    value = session.get('test')
    return render_template_string(READ_VALUE,
                                  value=NOT_SET if value is None else value)


@blueprint.route('/Regenerate', methods=['POST'])
def regenerate() -> Response:
    """Issue a new session identifier, as a login would."""
    session.regenerate()    # type: ignore
    return redirect(url_for('demo.read_value'))
