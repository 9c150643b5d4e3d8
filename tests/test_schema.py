# -*- coding: utf-8 -
#
# This file is part of couchmodel released under the MIT license.
# See the NOTICE for more information.

import datetime
import decimal
import unittest

from couchmodel import Document, DocumentBase, ViewBy, ViewRegistry, \
StringProperty, IntegerProperty, DateTimeProperty, DecimalProperty, \
ListProperty, BooleanProperty, SetProperty, hook, contain, BadValueError, \
ReservedWordError, DuplicatePropertyError, ConfigurationError, \
PersistenceFailure, ViewNotDeclared, QueryFailed
from couchmodel.schema import conventional_map

from memorydb import MemoryDatabase


class PropertyTestCase(unittest.TestCase):

    def testStringProperty(self):
        class Test(Document):
            string = StringProperty()

        test = Test(string="test")
        self.assertEqual(test.string, "test")
        self.assertEqual(test['string'], "test")
        test.string = "essai"
        self.assertEqual(test['string'], "essai")
        self.assertRaises(BadValueError, setattr, test, 'string', 1)

    def testPropertyName(self):
        class Test(Document):
            title = StringProperty(name="the_title")

        test = Test(the_title="a")
        self.assertEqual(test.title, "a")
        test.title = "b"
        self.assertEqual(test['the_title'], "b")
        self.assertNotIn('title', test)

    def testIntegerProperty(self):
        class Test(Document):
            count = IntegerProperty(default=1)

        test = Test()
        self.assertEqual(test.count, 1)
        self.assertRaises(BadValueError, setattr, test, 'count', "1")

    def testDateTimeProperty(self):
        class Test(Document):
            date = DateTimeProperty()

        d = datetime.datetime(2009, 1, 31, 12, 30, 15, 200)
        test = Test(date=d)
        self.assertEqual(test.to_json()['date'], "2009-01-31T12:30:15Z")
        self.assertEqual(test.date, d.replace(microsecond=0))
        self.assertRaises(BadValueError, setattr, test, 'date', "2009-01-31")

        test = Test.wrap({"date": "2010-03-01T08:00:00Z"})
        self.assertEqual(test.date, datetime.datetime(2010, 3, 1, 8, 0, 0))

    def testDecimalProperty(self):
        class Test(Document):
            price = DecimalProperty()

        test = Test()
        test.price = decimal.Decimal("10.5")
        self.assertEqual(test.to_json()['price'], "10.5")
        self.assertEqual(test.price, decimal.Decimal("10.5"))

    def testListDefaultNotShared(self):
        class Test(Document):
            tags = ListProperty()

        a = Test()
        b = Test()
        a['tags'].append("x")
        self.assertEqual(b['tags'], [])

    def testSetProperty(self):
        class Test(Document):
            tags = SetProperty(str)

        test = Test(tags={"b", "a"})
        test.tags.add("a")
        self.assertEqual(sorted(test.to_json()['tags']), ["a", "b"])

    def testChoices(self):
        class Test(Document):
            state = StringProperty(choices=["draft", "published"])

        test = Test()
        test.state = "draft"
        self.assertRaises(BadValueError, setattr, test, 'state', "gone")

    def testRequired(self):
        class Test(Document):
            title = StringProperty(required=True)

        test = Test()
        self.assertRaises(BadValueError, test.validate)
        test.title = "t"
        test.validate()

    def testValidateStoredJson(self):
        class Test(Document):
            date = DateTimeProperty(required=True)
            published = BooleanProperty()

        test = Test.wrap({"date": "2009-01-01T00:00:00Z"})
        test.validate()
        self.assertEqual(test.date, datetime.datetime(2009, 1, 1))
        self.assertRaises(BadValueError, Test.wrap, {"published": "yes"})

    def testDeleteProperty(self):
        class Test(Document):
            title = StringProperty()

        test = Test(title="t")
        del test['title']
        self.assertIsNone(test.title)
        self.assertIsNone(test.to_json()['title'])

    def testReadOnly(self):
        class Test(Document):
            slug = StringProperty(writable=False)

        test = Test(slug="a-slug")
        self.assertEqual(test.slug, "a-slug")
        self.assertRaises(AttributeError, setattr, test, 'slug', "other")
        # the mapping is still writable
        test['slug'] = "other"
        self.assertEqual(test.slug, "other")

    def testWriteOnly(self):
        class Test(Document):
            secret = StringProperty(readable=False)

        test = Test()
        test.secret = "s"
        self.assertEqual(test['secret'], "s")
        self.assertRaises(AttributeError, getattr, test, 'secret')

    def testReservedWords(self):
        def define(attr_name):
            type("Test", (Document,), {attr_name: StringProperty()})

        for name in ('_id', 'id', 'save', 'doc_type', 'items', 'keys'):
            self.assertRaises(ReservedWordError, define, name)

    def testDuplicateKey(self):
        def define():
            class Test(Document):
                a = StringProperty(name="x")
                b = StringProperty(name="x")
        self.assertRaises(DuplicatePropertyError, define)

    def testInheritance(self):
        class Base(Document):
            title = StringProperty()

        class Child(Base):
            body = StringProperty()

        child = Child(title="t", body="b")
        self.assertIn("title", Child.properties())
        self.assertIn("body", Child.properties())
        self.assertNotIn("body", Base.properties())
        self.assertEqual(child['doc_type'], "Child")
        self.assertEqual(child.to_json(), {"doc_type": "Child",
            "title": "t", "body": "b"})


class DocumentTestCase(unittest.TestCase):

    def setUp(self):
        self.db = MemoryDatabase()

    def testTypeTag(self):
        class Article(Document):
            pass

        article = Article(title="t")
        self.assertEqual(article['doc_type'], "Article")
        self.assertEqual(article['title'], "t")
        self.assertEqual(article.to_json(), {"doc_type": "Article",
            "title": "t"})

    def testCustomTypeName(self):
        class Post(Document):
            doc_type = "BlogPost"

        self.assertEqual(Post._doc_type, "BlogPost")
        self.assertEqual(Post()['doc_type'], "BlogPost")

    def testStoredTypeTagKept(self):
        class Article(Document):
            pass

        article = Article({"_id": "a", "_rev": "1-a", "doc_type": "Old"})
        self.assertEqual(article['doc_type'], "Old")

    def testDefaults(self):
        class Article(Document):
            defaults = {"state": "draft", "tags": [], "votes": 0}
            votes = IntegerProperty(default=3)

        a = Article()
        self.assertEqual(a['state'], "draft")
        # the defaults mapping comes after property defaults
        self.assertEqual(a['votes'], 0)
        a['tags'].append("x")
        self.assertEqual(Article()['tags'], [])

        b = Article(state="published")
        self.assertEqual(b['state'], "published")

    def testSaveLifecycle(self):
        class Article(Document):
            title = StringProperty()

        article = Article(title="Hello")
        article.set_db(self.db)
        self.assertTrue(article.new_document)
        self.assertIsNone(article.id)
        self.assertIsNone(article.rev)

        self.assertTrue(article.save())
        self.assertFalse(article.new_document)
        docid, rev = article.id, article.rev
        self.assertTrue(docid)
        self.assertEqual(self.db.docs[docid]['title'], "Hello")
        self.assertEqual(self.db.docs[docid]['doc_type'], "Article")

        article.title = "World"
        article.save()
        self.assertEqual(article.id, docid)
        self.assertNotEqual(article.rev, rev)
        self.assertEqual(self.db.docs[docid]['title'], "World")

        loaded = Article.get(docid)
        self.assertIsInstance(loaded, Article)
        self.assertEqual(loaded.title, "World")

        self.assertTrue(article.destroy())
        self.assertNotIn(docid, self.db.docs)
        self.assertTrue(article.new_document)
        self.assertIsNone(article.id)
        self.assertNotIn('_id', article.to_json())
        self.assertNotIn('_rev', article.to_json())

    def testDestroyNewDocument(self):
        class Article(Document):
            pass
        Article.set_db(self.db)
        self.assertRaises(TypeError, Article().destroy)

    def testNoDatabase(self):
        class Article(Document):
            pass
        self.assertRaises(TypeError, Article().save)

    def testUniqueIdFromKey(self):
        class Article(Document):
            unique_id = "slug"
            slug = StringProperty()
        Article.set_db(self.db)

        article = Article(slug="hello-world")
        article.save()
        self.assertEqual(article.id, "hello-world")
        self.assertIn("hello-world", self.db.docs)

        # destroyed then saved again, same id
        article.destroy()
        article.save()
        self.assertEqual(article.id, "hello-world")

    def testUniqueIdFromMethod(self):
        class Article(Document):
            unique_id = "make_id"

            def make_id(self):
                return "article-%s" % self['number']
        Article.set_db(self.db)

        article = Article(number=4)
        article.save()
        self.assertEqual(article.id, "article-4")

    def testUniqueIdCallable(self):
        class Article(Document):
            unique_id = lambda doc: doc['title'].lower()
        Article.set_db(self.db)

        article = Article(title="Hello")
        article.save()
        self.assertEqual(article.id, "hello")

    def testUniqueIdEmpty(self):
        class Article(Document):
            unique_id = "slug"
        Article.set_db(self.db)

        for value in (None, ""):
            article = Article(slug=value)
            self.assertRaises(ConfigurationError, article.save)
        self.assertEqual(self.db.count('save_doc'), 0)

    def testUniqueIdNotAString(self):
        class Article(Document):
            unique_id = lambda doc: 42
        Article.set_db(self.db)

        self.assertRaises(ConfigurationError, Article().save)
        self.assertEqual(self.db.count('save_doc'), 0)

    def testUniqueIdKeepsExistingId(self):
        class Article(Document):
            unique_id = "slug"
        Article.set_db(self.db)

        article = Article(_id="given", slug="hello")
        article.save()
        self.assertEqual(article.id, "given")

    def testSaveNotOk(self):
        class Article(Document):
            pass
        Article.set_db(self.db)
        self.db.save_result = {"ok": False, "error": "forbidden"}

        article = Article()
        try:
            article.save()
        except PersistenceFailure as e:
            self.assertEqual(e.result, {"ok": False, "error": "forbidden"})
        else:
            self.fail("PersistenceFailure not raised")
        self.assertTrue(article.new_document)

    def testDestroyNotOk(self):
        class Article(Document):
            pass
        Article.set_db(self.db)

        article = Article()
        article.save()
        self.db.delete_result = {"ok": False}
        self.assertRaises(PersistenceFailure, article.destroy)
        self.assertFalse(article.new_document)

    def testTimestamps(self):
        class Article(Document):
            timestamps = True
        Article.set_db(self.db)

        article = Article()
        self.assertIsNone(article.created_at)
        article.save()
        self.assertIsInstance(article.created_at, datetime.datetime)
        self.assertEqual(article['created_at'], article['updated_at'])
        self.assertIn('created_at', self.db.docs[article.id])
        self.assertRaises(AttributeError, setattr, article, 'created_at',
                datetime.datetime(2000, 1, 1))

        created = article['created_at']
        article['updated_at'] = datetime.datetime(2000, 1, 1)
        article.save()
        self.assertEqual(article['created_at'], created)
        self.assertNotEqual(article['updated_at'],
                datetime.datetime(2000, 1, 1))
        self.assertTrue(self.db.docs[article.id]['updated_at'].endswith("Z"))

    def testContain(self):
        class A(Document):
            pass

        class B(Document):
            pass

        contain(self.db, A, B)
        self.assertIs(A.get_db(), self.db)
        self.assertIs(B.get_db(), self.db)


class HookTestCase(unittest.TestCase):

    def setUp(self):
        self.db = MemoryDatabase()

    def testOrder(self):
        calls = []

        class Article(Document):

            @hook("before", "save")
            def before_save(self):
                calls.append("before_save")

            @hook("before", "create")
            def before_create(self):
                calls.append("before_create")

            @hook("after", "create")
            def after_create(self):
                calls.append("after_create")

            @hook("after", "save")
            def after_save(self):
                calls.append("after_save")

        Article.before("update", lambda doc: calls.append("before_update"))
        Article.after("update", lambda doc: calls.append("after_update"))
        Article.before("destroy", lambda doc: calls.append("before_destroy"))
        Article.after("destroy", lambda doc: calls.append("after_destroy"))
        Article.set_db(self.db)

        article = Article()
        article.save()
        self.assertEqual(calls, ["before_save", "before_create",
            "after_create", "after_save"])

        del calls[:]
        article.save()
        self.assertEqual(calls, ["before_save", "before_update",
            "after_update", "after_save"])

        del calls[:]
        article.destroy()
        self.assertEqual(calls, ["before_destroy", "after_destroy"])

    def testRegistrationOrder(self):
        calls = []

        class Article(Document):
            pass

        Article.before("save", lambda doc: calls.append(1))
        Article.before("save", lambda doc: calls.append(2))
        Article.set_db(self.db)
        Article().save()
        self.assertEqual(calls, [1, 2])

    def testBeforeCreateSeesNoId(self):
        seen = []

        class Article(Document):
            unique_id = "slug"

            @hook("before", "create")
            def make_slug(self):
                seen.append(self.id)
                self['slug'] = self['title'].lower()

        Article.set_db(self.db)
        article = Article(title="Hello")
        article.save()
        self.assertEqual(seen, [None])
        self.assertEqual(article.id, "hello")

    def testSubclassHooksDontLeak(self):
        calls = []

        class Base(Document):
            pass

        class Child(Base):
            pass

        Child.before("save", lambda doc: calls.append("child"))
        contain(self.db, Base, Child)
        Base().save()
        self.assertEqual(calls, [])
        Child().save()
        self.assertEqual(calls, ["child"])

    def testValidateAfterBeforeHooks(self):
        class Article(Document):
            slug = StringProperty(required=True)

            @hook("before", "create")
            def make_slug(self):
                self['slug'] = self['title'].lower()

        Article.set_db(self.db)
        article = Article(title="Hello")
        self.assertTrue(article.save())
        self.assertEqual(self.db.docs[article.id]['slug'], "hello")

    def testInvalidAfterHooksNotSaved(self):
        class Article(Document):
            slug = StringProperty(required=True)

        Article.before("save", lambda doc: None)
        Article.set_db(self.db)
        self.assertRaises(BadValueError, Article().save)
        self.assertEqual(self.db.count('save_doc'), 0)

    def testHooksOfEveryBase(self):
        calls = []

        class Sluggable(Document):

            @hook("before", "save")
            def slug(self):
                calls.append("slug")

        class Stamped(Document):

            @hook("before", "save")
            def stamp(self):
                calls.append("stamp")

        class Article(Sluggable, Stamped):

            @hook("before", "save")
            def article(self):
                calls.append("article")

        Article.set_db(self.db)
        Article().save()
        self.assertEqual(sorted(calls[:2]), ["slug", "stamp"])
        self.assertEqual(calls[2:], ["article"])

    def testUnknownEvent(self):
        class Article(Document):
            pass
        self.assertRaises(ValueError, Article.before, "validate", id)
        self.assertRaises(ValueError, hook, "around", "save")


class DocumentViewsTestCase(unittest.TestCase):

    def setUp(self):
        self.db = MemoryDatabase()
        self.registry = registry = ViewRegistry()

        class Article(DocumentBase):
            _registry = registry

            title = StringProperty()
            date = StringProperty()

            by_date = ViewBy("date", descending=True)
            by_user_id_and_date = ViewBy("user_id", "date")

        Article.set_db(self.db)
        self.Article = Article

    def _save(self, **values):
        article = self.Article(**values)
        article.save()
        return article

    def testDeclaredOnClassCreation(self):
        definition = self.registry.lookup("Article", "by_date")
        self.assertEqual(definition.map_fun,
                conventional_map("Article", ["date"]))
        self.assertIn("by_user_id_and_date",
                self.registry.design_doc("Article").views)
        self.assertFalse(self.registry.is_fresh("Article"))

    def testQueryHydrates(self):
        a = self._save(title="A", date="2009-01-01")
        b = self._save(title="B", date="2009-01-02")
        self.db.view_rows["Article/by_date"] = [
            {"id": b.id, "key": "2009-01-02", "value": None},
            {"id": a.id, "key": "2009-01-01", "value": None}
        ]

        docs = self.Article.by_date()
        self.assertEqual([d.title for d in docs], ["B", "A"])
        self.assertTrue(all(isinstance(d, self.Article) for d in docs))
        self.assertIn("_design/Article", self.db.docs)
        self.assertTrue(self.registry.is_fresh("Article"))

    def testQueryDefaultsMerge(self):
        self.Article.by_date()
        self.Article.by_date(descending=False, limit=1)
        params = [c[2] for c in self.db.calls if c[0] == 'view']
        self.assertEqual(params, [{"descending": True},
            {"descending": False, "limit": 1}])

    def testRawQuery(self):
        rows = [{"id": "x", "key": ["u", "d"], "value": None}]
        self.db.view_rows["Article/by_user_id_and_date"] = rows
        self.assertEqual(self.Article.by_user_id_and_date(raw=True), rows)

    def testViewNotAccessibleOnInstance(self):
        self.assertRaises(AttributeError, getattr, self.Article(), "by_date")

    def testUnknownView(self):
        self.assertRaises(ViewNotDeclared, self.Article.query_view, "by_x")

    def testRuntimeDeclaration(self):
        self.Article.by_date()
        self.assertTrue(self.registry.is_fresh("Article"))

        name = self.Article.view_by("title")
        self.assertEqual(name, "by_title")
        self.assertFalse(self.registry.is_fresh("Article"))

        self.db.view_rows["Article/by_title"] = []
        self.assertEqual(self.Article.by_title(), [])
        views = self.db.docs["_design/Article"]["views"]
        self.assertEqual(sorted(views), ["by_date", "by_title",
            "by_user_id_and_date"])

    def testReduceView(self):
        self.Article.view_by("tags",
                map_fun="function(doc) { emit(doc.tags, 1); }",
                reduce_fun="_sum")
        definition = self.registry.lookup("Article", "by_tags")
        self.assertTrue(definition.has_reduce)

        self.db.view_rows["Article/by_tags"] = [{"key": None, "value": 3}]
        self.assertEqual(self.Article.by_tags(reduce=True),
                [{"key": None, "value": 3}])
        params = [c[2] for c in self.db.calls if c[0] == 'view']
        self.assertEqual(params, [{"reduce": True}])

    def testReduceNeedsMap(self):
        self.assertRaises(ValueError, ViewBy, "tags", reduce_fun="_sum")

    def testDesignDocDeleted(self):
        self.Article.by_date()
        del self.db.docs["_design/Article"]
        self.assertEqual(self.Article.by_date(), [])
        self.assertIn("_design/Article", self.db.docs)

    def testStillMissing(self):
        self.registry.mark_fresh("Article")
        self.db.missing_views = 2
        self.assertRaises(QueryFailed, self.Article.by_date)

    def testSetRegistry(self):
        other = ViewRegistry()
        self.Article.set_registry(other)
        self.assertIs(self.Article.get_registry(), other)
        self.assertIn("by_date", other.design_doc("Article").views)

        self.Article.by_date()
        self.assertTrue(other.is_fresh("Article"))
        self.assertFalse(self.registry.is_fresh("Article"))

    def testSetRegistryReachesSubclasses(self):
        class Post(self.Article):
            by_title = ViewBy("title")

        other = ViewRegistry()
        self.Article.set_registry(other)
        self.assertIs(Post.get_registry(), other)
        views = other.design_doc("Post").views
        self.assertIn("by_title", views)
        self.assertIn("by_date", views)

        self.db.view_rows["Post/by_title"] = []
        self.assertEqual(Post.by_title(), [])
        self.assertIn("by_title", self.db.docs["_design/Post"]["views"])

    def testSetRegistryKeepsOwnRegistry(self):
        own = ViewRegistry()

        class Post(self.Article):
            _registry = own
            by_title = ViewBy("title")

        self.Article.set_registry(ViewRegistry())
        self.assertIs(Post.get_registry(), own)

    def testNoRegistry(self):
        class Orphan(DocumentBase):
            by_title = ViewBy("title")

        Orphan.set_db(self.db)
        self.assertRaises(TypeError, Orphan.get_registry)
        self.assertRaises(TypeError, Orphan.view_by, "date")
        self.assertRaises(TypeError, Orphan.by_title)
        self.assertEqual(self.db.calls, [])


if __name__ == '__main__':
    unittest.main()
