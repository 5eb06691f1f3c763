from sqlalchemy import Column, Text
from linkhop_app.database.connection import Base


class ShortcodeMapping(Base):
    """
    A shortcode and the URL it redirects to.

    Rows are only ever inserted. The primary key is what rejects a second
    insert for the same shortcode.
    """
    __tablename__ = "urls"

    shortcode = Column(Text, primary_key=True)
    url = Column(Text, nullable=False)
