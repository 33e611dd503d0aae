"""Service banner and diagnostics."""

from flask import Blueprint, jsonify
from purple_publishing.models import Submission, User

main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def index():
    return jsonify({'service': 'Purple Publishing API', 'status': 'ok'})


@main_bp.route('/api/test/db')
def test_db():
    """Row counts, to check the database is reachable."""
    return jsonify({
        'users': User.query.count(),
        'submissions': Submission.query.count()
    })
