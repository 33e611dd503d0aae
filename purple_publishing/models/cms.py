"""CMS content model."""

import uuid
from purple_publishing.extensions import db
from purple_publishing.utils.dates import utcnow, isoformat


class CmsEntry(db.Model):
    """Opaque JSON document addressed by (site_key, key)."""
    __tablename__ = 'cms_entries'
    __table_args__ = (
        db.UniqueConstraint('site_key', 'key', name='uq_cms_entries_site_key_key'),
    )

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    site_key = db.Column(db.String(100), nullable=False)
    key = db.Column(db.String(200), nullable=False)
    json = db.Column(db.Text, nullable=False, default='{}')
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    @staticmethod
    def find(site_key, key):
        return CmsEntry.query.filter_by(site_key=site_key, key=key).first()

    @staticmethod
    def upsert(site_key, key, json_text):
        """Create or replace the entry, stamping the current time."""
        entry = CmsEntry.find(site_key, key)
        if entry is None:
            entry = CmsEntry(site_key=site_key, key=key)
            db.session.add(entry)
        entry.json = json_text if json_text is not None else '{}'
        entry.updated_at = utcnow()
        db.session.commit()
        return entry

    def to_dict(self):
        return {
            'siteKey': self.site_key,
            'key': self.key,
            'json': self.json,
            'updatedAtUtc': isoformat(self.updated_at),
        }

    def __repr__(self):
        return f'<CmsEntry {self.site_key}.{self.key}>'
