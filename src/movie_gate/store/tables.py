#    Copyright 2025 FAO
#
#    Licensed under the Apache License, Version 2.0 (the "License");
#    you may not use this file except in compliance with the License.
#    You may obtain a copy of the License at
#
#        http://www.apache.org/licenses/LICENSE-2.0
#
#    Unless required by applicable law or agreed to in writing, software
#    distributed under the License is distributed on an "AS IS" BASIS,
#    WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#    See the License for the specific language governing permissions and
#    limitations under the License.
#
#    Author: Carlo Cancellieri (ccancellieri@gmail.com)
#    Company: FAO, Viale delle Terme di Caracalla, 00100 Rome, Italy
#    Contact: copyright@fao.org - http://fao.org/contact-us/terms/en/

from sqlalchemy import Column, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class User(Base):
    __tablename__ = "Users"

    id = Column(String(36), primary_key=True)
    provider_id = Column(String(255), nullable=False, unique=True)
    username = Column(String(255))
    email = Column(String(255))


class Movie(Base):
    __tablename__ = "Movies"

    # Catalog (TMDB) id, not generated locally.
    id = Column(Integer, primary_key=True, autoincrement=False)
    title = Column(String(255), nullable=False)
    release_date = Column(String(10))
    overview = Column(Text)
    poster_url = Column(String(255))


class Favourite(Base):
    __tablename__ = "Favourites"
    __table_args__ = (UniqueConstraint("user_id", "movie_id", name="uq_favourites_user_movie"),)

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), ForeignKey("Users.id", ondelete="CASCADE"), nullable=False)
    movie_id = Column(Integer, ForeignKey("Movies.id"), nullable=False)
