# tests/test_admin_posts.py
import os
import io
from datetime import datetime

from blogcms.extensions import db
from blogcms.models import Post, Comment
from conftest import props


def post_data(category_id, **overrides):
    data = {
        'title': 'Hello World',
        'content': 'Lorem ipsum',
        'category_id': str(category_id),
    }
    data.update(overrides)
    return data


def get_post(app, post_id=None):
    with app.app_context():
        if post_id is None:
            post = Post.query.one()
        else:
            post = db.session.get(Post, post_id)
        if post is None:
            return None
        return {
            'id': post.id, 'title': post.title, 'slug': post.slug, 'content': post.content,
            'category_id': post.category_id, 'published_at': post.published_at, 'image': post.image,
        }


def stored_path(app, reference):
    return os.path.join(app.config['UPLOAD_FOLDER'], reference)


# --- 作成 ---

def test_create_post(app, admin_client, category_id):
    response = admin_client.post('/admin/posts', data=post_data(category_id))
    assert response.status_code == 302
    assert response.headers['Location'].endswith('/admin/posts')

    post = get_post(app)
    assert post['title'] == 'Hello World'
    assert post['slug'] == 'hello-world'
    assert post['category_id'] == category_id
    assert post['published_at'] is None
    assert post['image'] is None

    listing = props(admin_client.get('/admin/posts'))
    assert listing['flash'] == {'success': 'Post created successfully.'}


def test_created_post_is_searchable(app, admin_client, login_as, make_user, category_id):
    admin_client.post('/admin/posts', data=post_data(category_id))

    login_as(make_user(role='user'))
    found = props(admin_client.get('/posts?search=hello'))['posts']['data']
    assert [p['title'] for p in found] == ['Hello World']
    assert props(admin_client.get('/posts?search=xyz'))['posts']['data'] == []


def test_create_post_normalizes_published_at(app, admin_client, category_id):
    admin_client.post('/admin/posts', data=post_data(category_id, published_at='2025-03-04T10:30'))
    assert get_post(app)['published_at'] == datetime(2025, 3, 4, 10, 30, 0)

    data = props(admin_client.get('/admin/posts'))['posts']['data'][0]
    assert data['published_at'] == '2025-03-04 10:30:00'


def test_create_post_converts_offset_to_utc(app, admin_client, category_id):
    admin_client.post('/admin/posts', data=post_data(category_id, published_at='2025-03-04T10:30:00+02:00'))
    assert get_post(app)['published_at'] == datetime(2025, 3, 4, 8, 30, 0)


def test_create_post_with_image(app, admin_client, category_id, png):
    response = admin_client.post(
        '/admin/posts',
        data=post_data(category_id, image=png()),
        content_type='multipart/form-data',
    )
    assert response.status_code == 302

    post = get_post(app)
    assert post['image'].startswith('posts/')
    assert post['image'].endswith('.png')
    assert os.path.isfile(stored_path(app, post['image']))

    data = props(admin_client.get('/admin/posts'))['posts']['data'][0]
    assert data['image'] == post['image']
    assert data['image_url'] == '/storage/' + post['image']

    served = admin_client.get(data['image_url'])
    assert served.status_code == 200
    served.close()


def test_create_post_validation_errors(app, admin_client, category_id):
    response = admin_client.post('/admin/posts', data={'title': '', 'content': '', 'category_id': ''})
    assert response.status_code == 302

    with app.app_context():
        assert Post.query.count() == 0

    errors = props(admin_client.get('/admin/posts'))['errors']
    assert set(errors) == {'title', 'content', 'category_id'}

    # エラーは一度だけ表示されます
    assert props(admin_client.get('/admin/posts'))['errors'] == {}


def test_create_post_rejects_unknown_category(app, admin_client, category_id):
    admin_client.post('/admin/posts', data=post_data(999))
    with app.app_context():
        assert Post.query.count() == 0
    assert 'category_id' in props(admin_client.get('/admin/posts'))['errors']


def test_create_post_rejects_too_long_fields(app, admin_client, category_id):
    admin_client.post('/admin/posts', data=post_data(category_id, title='x' * 256, content='y' * 15001))
    with app.app_context():
        assert Post.query.count() == 0
    assert set(props(admin_client.get('/admin/posts'))['errors']) == {'title', 'content'}


def test_create_post_rejects_invalid_date(app, admin_client, category_id):
    admin_client.post('/admin/posts', data=post_data(category_id, published_at='not-a-date'))
    with app.app_context():
        assert Post.query.count() == 0
    assert 'published_at' in props(admin_client.get('/admin/posts'))['errors']


def test_create_post_rejects_non_image_upload(app, admin_client, category_id):
    admin_client.post(
        '/admin/posts',
        data=post_data(category_id, image=(io.BytesIO(b'not really a png'), 'fake.png')),
        content_type='multipart/form-data',
    )
    with app.app_context():
        assert Post.query.count() == 0
    assert 'image' in props(admin_client.get('/admin/posts'))['errors']
    assert not os.listdir(os.path.join(app.config['UPLOAD_FOLDER'], 'posts'))


def test_create_post_rejects_oversized_image(app, admin_client, category_id, png):
    app.config['MAX_IMAGE_SIZE_KB'] = 0
    admin_client.post(
        '/admin/posts',
        data=post_data(category_id, image=png()),
        content_type='multipart/form-data',
    )
    with app.app_context():
        assert Post.query.count() == 0
    assert 'image' in props(admin_client.get('/admin/posts'))['errors']


def test_slug_is_not_unique(app, admin_client, category_id):
    admin_client.post('/admin/posts', data=post_data(category_id))
    admin_client.post('/admin/posts', data=post_data(category_id))
    with app.app_context():
        assert [p.slug for p in Post.query.all()] == ['hello-world', 'hello-world']


# --- 更新 ---

def test_update_post_recomputes_slug(app, admin_client, category_id, make_post):
    post_id = make_post('Hello World', category_id)

    response = admin_client.put(f'/admin/posts/{post_id}', data=post_data(category_id, title='Goodbye, World'))
    assert response.status_code == 302

    post = get_post(app, post_id)
    assert post['title'] == 'Goodbye, World'
    assert post['slug'] == 'goodbye-world'
    assert props(admin_client.get('/admin/posts'))['flash'] == {'success': 'Post updated successfully.'}


def test_update_through_form_post_with_method_field(app, admin_client, category_id, make_post, png):
    post_id = make_post('Hello World', category_id)

    response = admin_client.post(
        f'/admin/posts/{post_id}',
        data=post_data(category_id, title='From a form', _method='PUT', image=png()),
        content_type='multipart/form-data',
    )
    assert response.status_code == 302

    post = get_post(app, post_id)
    assert post['title'] == 'From a form'
    assert os.path.isfile(stored_path(app, post['image']))


def test_post_without_method_field_is_not_allowed(admin_client, category_id, make_post):
    post_id = make_post('Hello World', category_id)
    assert admin_client.post(f'/admin/posts/{post_id}', data=post_data(category_id)).status_code == 405


def test_update_with_same_slugified_title_keeps_slug(app, admin_client, category_id, make_post):
    post_id = make_post('Hello World', category_id)
    admin_client.patch(f'/admin/posts/{post_id}', data=post_data(category_id, title='hello   WORLD!'))
    assert get_post(app, post_id)['slug'] == 'hello-world'


def test_update_post_not_found(admin_client, category_id):
    response = admin_client.put('/admin/posts/999', data=post_data(category_id))
    assert response.status_code == 404


def test_update_validation_error_keeps_post(app, admin_client, category_id, make_post):
    post_id = make_post('Hello World', category_id)
    admin_client.put(f'/admin/posts/{post_id}', data=post_data(category_id, title=''))
    assert get_post(app, post_id)['title'] == 'Hello World'


def test_update_replaces_old_image(app, admin_client, category_id, png):
    admin_client.post(
        '/admin/posts',
        data=post_data(category_id, image=png('first.png')),
        content_type='multipart/form-data',
    )
    before = get_post(app)
    old_path = stored_path(app, before['image'])
    assert os.path.isfile(old_path)

    admin_client.put(
        f"/admin/posts/{before['id']}",
        data=post_data(category_id, image=png('second.png', color=(0, 0, 255))),
        content_type='multipart/form-data',
    )
    after = get_post(app)
    assert after['image'] != before['image']
    assert not os.path.exists(old_path)
    assert os.path.isfile(stored_path(app, after['image']))
    assert os.listdir(os.path.join(app.config['UPLOAD_FOLDER'], 'posts')) == [os.path.basename(after['image'])]


def test_update_without_image_keeps_existing_image(app, admin_client, category_id, png):
    admin_client.post(
        '/admin/posts',
        data=post_data(category_id, image=png()),
        content_type='multipart/form-data',
    )
    before = get_post(app)
    admin_client.put(f"/admin/posts/{before['id']}", data=post_data(category_id, title='New title'))
    after = get_post(app)
    assert after['image'] == before['image']
    assert os.path.isfile(stored_path(app, after['image']))


def test_update_with_missing_old_file_stores_new_image(app, admin_client, category_id, make_post, png):
    post_id = make_post('Hello World', category_id, image='posts/gone.png')
    admin_client.put(
        f'/admin/posts/{post_id}',
        data=post_data(category_id, image=png()),
        content_type='multipart/form-data',
    )
    post = get_post(app, post_id)
    assert post['image'] != 'posts/gone.png'
    assert os.path.isfile(stored_path(app, post['image']))


# --- 削除 ---

def test_delete_post_removes_comments(app, admin_client, category_id, make_post, make_comment, make_user):
    post_id = make_post('Hello World', category_id)
    make_comment(post_id, make_user())

    response = admin_client.delete(f'/admin/posts/{post_id}')
    assert response.status_code == 302
    assert get_post(app, post_id) is None
    with app.app_context():
        assert Comment.query.count() == 0
    assert props(admin_client.get('/admin/posts'))['flash'] == {'success': 'Post deleted successfully.'}


def test_delete_through_form_post_with_method_field(app, admin_client, category_id, make_post):
    post_id = make_post('Hello World', category_id)
    response = admin_client.post(f'/admin/posts/{post_id}', data={'_method': 'DELETE'})
    assert response.status_code == 302
    assert get_post(app, post_id) is None


def test_delete_post_not_found(admin_client):
    assert admin_client.delete('/admin/posts/999').status_code == 404


def test_delete_post_leaves_image_by_default(app, admin_client, category_id, png):
    admin_client.post('/admin/posts', data=post_data(category_id, image=png()),
                      content_type='multipart/form-data')
    post = get_post(app)
    admin_client.delete(f"/admin/posts/{post['id']}")
    assert os.path.isfile(stored_path(app, post['image']))


def test_delete_post_removes_image_when_enabled(app, admin_client, category_id, png):
    app.config['DELETE_POST_IMAGES'] = True
    admin_client.post('/admin/posts', data=post_data(category_id, image=png()),
                      content_type='multipart/form-data')
    post = get_post(app)
    admin_client.delete(f"/admin/posts/{post['id']}")
    assert not os.path.exists(stored_path(app, post['image']))


# --- 一覧 ---

def test_admin_listing(admin_client, category_id, make_post, make_comment, make_user):
    for i in range(12):
        make_post(f'Post {i}', category_id, age_minutes=i)
    commenter = make_user('carol')
    make_comment(1, commenter, 'Nice')

    response = admin_client.get('/admin/posts')
    payload = response.get_json()
    assert payload['component'] == 'admin/posts'

    posts = payload['props']['posts']
    assert posts['per_page'] == 10
    assert posts['total'] == 12
    assert posts['last_page'] == 2
    assert len(posts['data']) == 10

    first = posts['data'][0]
    assert first['title'] == 'Post 0'
    assert first['slug'] == 'post-0'
    assert first['category_id'] == category_id
    assert first['published_at'] is None
    assert first['image'] is None
    assert first['image_url'] is None
    assert first['comments_count'] == 1
    assert first['comments'][0]['user'] == {'id': commenter, 'name': 'carol'}
    assert payload['props']['categories'] == [{'id': category_id, 'name': 'General'}]
