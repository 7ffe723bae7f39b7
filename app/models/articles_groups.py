"""
Model: ArticlesGroups
Denormalized mirror of an article plus its highlight/articlegroup flags
"""

from db import db


class ArticlesGroups(db.Model):
    __tablename__ = "articles_groups"

    article_id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    issue_date = db.Column(db.BigInteger, index=True)  # Epoch milliseconds
    starting_date = db.Column(db.BigInteger)
    ending_date = db.Column(db.BigInteger)
    sub_menu_id = db.Column(db.Integer)
    menu = db.Column(db.String)
    heading = db.Column(db.String)
    body = db.Column(db.Text)
    picture_location = db.Column(db.String)
    picture2_location = db.Column(db.String)
    by_line = db.Column(db.String)

    # Highlight flags ("Yes"/"No")
    highlight1_flag = db.Column(db.String(3), index=True)
    highlight2_flag = db.Column(db.String(3), index=True)
    highlight3_flag = db.Column(db.String(3), index=True)
    highlight4_flag = db.Column(db.String(3), index=True)
    highlight5_flag = db.Column(db.String(3), index=True)
    highlight6_flag = db.Column(db.String(3), index=True)
    highlight7_flag = db.Column(db.String(3), index=True)
    highlight8_flag = db.Column(db.String(3), index=True)
    highlight9_flag = db.Column(db.String(3), index=True)

    # ArticleGroup flags ("Yes"/"No")
    articlegroup1_flag = db.Column(db.String(3), index=True)
    articlegroup2_flag = db.Column(db.String(3), index=True)
    articlegroup3_flag = db.Column(db.String(3), index=True)
    articlegroup4_flag = db.Column(db.String(3), index=True)
    articlegroup5_flag = db.Column(db.String(3), index=True)
    articlegroup6_flag = db.Column(db.String(3), index=True)
    articlegroup7_flag = db.Column(db.String(3), index=True)
    articlegroup8_flag = db.Column(db.String(3), index=True)
    articlegroup9_flag = db.Column(db.String(3), index=True)

    unique_file = db.Column(db.String)
    active = db.Column(db.String(3), default="Yes", index=True)
    created_by = db.Column(db.Integer)
    creation_date = db.Column(db.BigInteger)
    last_updated_by = db.Column(db.Integer)
    last_update_date = db.Column(db.BigInteger)
