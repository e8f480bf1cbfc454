import io
import logging
import threading

from flask import Flask, jsonify, render_template_string, request, send_file

from . import config
from .errors import LotteryError, ValidationError
from .images import image_to_data_url
from .preview import RollingPreview
from .scheduler import ThreadScheduler
from .session import (
    SessionState,
    add_prize,
    check_ready,
    close_lottery,
    commit_draw,
    delete_prize,
    edit_draw,
    import_participants,
    open_lottery,
    reset_history,
    run_draw,
    select_prize,
    set_background_image,
    update_settings,
)
from .spreadsheets import history_workbook, read_participant_names

logger = logging.getLogger(__name__)

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


class SessionStore:
    """The single in-memory session served by one app, plus its running preview."""

    def __init__(self, scheduler=None, rng=None):
        self.state = SessionState()
        self.preview = None
        self.preview_prize = None
        self.scheduler = scheduler or ThreadScheduler()
        self.rng = rng
        self.lock = threading.Lock()

    @property
    def rolling(self):
        return self.preview is not None and self.preview.rolling

    def stop_preview(self):
        """Stop a rolling preview without recording anything."""
        if self.preview is not None:
            self.preview.stop()
        self.preview = None
        self.preview_prize = None


def error_response(e):
    logger.warning("%s: %s", type(e).__name__, e)
    return jsonify({"error": str(e)}), e.status_code


def _int_field(value, label):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a whole number.") from None


def _bool_field(value, label):
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ('true', '1', 'yes', 'on'):
            return True
        if lowered in ('false', '0', 'no', 'off', ''):
            return False
    raise ValidationError(f"{label} must be true or false.")


def _settings_from_payload(payload):
    """Map the settings form payload onto SessionState field names."""
    if not isinstance(payload, dict):
        raise ValidationError("Settings must be a JSON object.")
    changes = {}
    for key in ('title', 'subtitle', 'rolling_speed'):
        if key in payload:
            changes[key] = payload[key]
    if 'participants' in payload:
        participants = payload['participants']
        if isinstance(participants, list):
            participants = "\n".join(str(p) for p in participants if p is not None)
        elif participants is not None and not isinstance(participants, str):
            raise ValidationError("Participants must be text or a list of names.")
        changes['participants_text'] = participants
    if 'winner_count' in payload:
        changes['winner_count'] = _int_field(payload['winner_count'], "Number of winners")
    if 'exclude_previous_winners' in payload:
        changes['exclude_previous_winners'] = _bool_field(
            payload['exclude_previous_winners'], "exclude_previous_winners"
        )
    return changes


def create_app(scheduler=None, rng=None):
    app = Flask(__name__)
    app.config.update(
        MAX_CONTENT_LENGTH=config.MAX_UPLOAD_BYTES,
    )
    store = SessionStore(scheduler=scheduler, rng=rng)
    app.extensions['luckydraw'] = store

    def state_json():
        return store.state.to_dict()

    def rolling_conflict():
        return jsonify({"error": "A draw is rolling. Stop it first."}), 409

    @app.route("/")
    def index():
        return render_template_string(HTML_TEMPLATE, title=store.state.title)

    @app.route("/api/state", methods=["GET"])
    def api_state():
        return jsonify(state_json())

    # ---------- settings page ----------

    @app.route("/api/settings", methods=["POST"])
    def api_settings():
        payload = request.get_json(silent=True) or {}
        try:
            with store.lock:
                if store.rolling:
                    return rolling_conflict()
                store.state = update_settings(store.state, **_settings_from_payload(payload))
        except LotteryError as e:
            return error_response(e)
        return jsonify(state_json())

    @app.route("/api/participants/upload", methods=["POST"])
    def api_upload_participants():
        file = request.files.get("file")
        if not file or not file.filename:
            return jsonify({"error": "No file uploaded"}), 400
        try:
            names = read_participant_names(file.stream, file.filename)
        except LotteryError as e:
            # participant list stays as it was
            return error_response(e)
        with store.lock:
            if store.rolling:
                return rolling_conflict()
            store.state = import_participants(store.state, names)
        return jsonify({"imported": len(names), **state_json()})

    @app.route("/api/background", methods=["POST", "DELETE"])
    def api_background():
        data_url = None
        if request.method == "POST":
            file = request.files.get("file")
            if not file or not file.filename:
                return jsonify({"error": "No file uploaded"}), 400
            try:
                data_url = image_to_data_url(file)
            except LotteryError as e:
                return error_response(e)
        with store.lock:
            store.state = set_background_image(store.state, data_url)
        return jsonify(state_json())

    @app.route("/api/prizes", methods=["POST"])
    def api_add_prize():
        payload = request.get_json(silent=True) or request.form
        image_url = None
        try:
            file = request.files.get("image")
            if file and file.filename:
                image_url = image_to_data_url(file)
            with store.lock:
                if store.rolling:
                    return rolling_conflict()
                store.state = add_prize(store.state, payload.get("name"), image_url)
        except LotteryError as e:
            return error_response(e)
        return jsonify(state_json())

    @app.route("/api/prizes/<prize_id>", methods=["DELETE"])
    def api_delete_prize(prize_id):
        try:
            with store.lock:
                if store.rolling:
                    return rolling_conflict()
                store.state = delete_prize(store.state, prize_id)
        except LotteryError as e:
            return error_response(e)
        return jsonify(state_json())

    @app.route("/api/prizes/select", methods=["POST"])
    def api_select_prize():
        payload = request.get_json(silent=True) or {}
        try:
            with store.lock:
                if store.rolling:
                    return rolling_conflict()
                store.state = select_prize(store.state, payload.get("prize_id") or None)
        except LotteryError as e:
            return error_response(e)
        return jsonify(state_json())

    # ---------- screens ----------

    @app.route("/api/lottery/open", methods=["POST"])
    def api_open_lottery():
        try:
            with store.lock:
                store.state = open_lottery(store.state)
        except LotteryError as e:
            return error_response(e)
        return jsonify(state_json())

    @app.route("/api/lottery/close", methods=["POST"])
    def api_close_lottery():
        with store.lock:
            store.stop_preview()
            store.state = close_lottery(store.state)
        return jsonify(state_json())

    # ---------- drawing ----------

    @app.route("/api/draw/start", methods=["POST"])
    def api_draw_start():
        with store.lock:
            if store.preview is not None and store.preview.rolling:
                return jsonify({"error": "A draw is already rolling."}), 409
            try:
                pool, prize = check_ready(store.state)
            except LotteryError as e:
                return error_response(e)
            preview = RollingPreview(
                pool,
                store.state.winner_count,
                store.state.rolling_speed,
                scheduler=store.scheduler,
                rng=store.rng,
            )
            names = preview.start()
            store.preview = preview
            store.preview_prize = prize
        return jsonify({
            "names": names,
            "interval_ms": round(preview.interval * 1000),
            "prize": prize.to_dict() if prize else None,
        })

    @app.route("/api/draw/preview", methods=["GET"])
    def api_draw_preview():
        preview = store.preview
        if preview is None:
            return jsonify({"names": [], "rolling": False})
        return jsonify({"names": preview.current, "rolling": preview.rolling})

    @app.route("/api/draw/stop", methods=["POST"])
    def api_draw_stop():
        with store.lock:
            if store.preview is None or not store.preview.rolling:
                return jsonify({"error": "No draw is rolling."}), 409
            # the names on screen at stop are the result
            winners = store.preview.stop()
            prize = store.preview_prize
            store.preview = None
            store.preview_prize = None
            store.state, record = commit_draw(store.state, winners, prize)
        return jsonify({"record": record.to_dict(), **state_json()})

    @app.route("/api/draw", methods=["POST"])
    def api_draw():
        try:
            with store.lock:
                if store.rolling:
                    return rolling_conflict()
                store.state, record = run_draw(store.state, store.rng)
        except LotteryError as e:
            return error_response(e)
        return jsonify({"record": record.to_dict(), **state_json()})

    # ---------- history ----------

    @app.route("/api/history/<draw_id>", methods=["PUT"])
    def api_edit_draw(draw_id):
        payload = request.get_json(silent=True) or {}
        winners = payload.get("winners", []) if isinstance(payload, dict) else None
        try:
            with store.lock:
                if store.rolling:
                    return rolling_conflict()
                store.state, record = edit_draw(store.state, draw_id, winners)
        except LotteryError as e:
            return error_response(e)
        return jsonify({"record": record.to_dict(), **state_json()})

    @app.route("/api/history", methods=["DELETE"])
    def api_reset_history():
        with store.lock:
            if store.rolling:
                return rolling_conflict()
            store.state = reset_history(store.state)
        return jsonify(state_json())

    @app.route("/api/history/export", methods=["GET"])
    def api_export_history():
        data = history_workbook(store.state.history)
        return send_file(
            io.BytesIO(data),
            mimetype=XLSX_MIMETYPE,
            as_attachment=True,
            download_name=config.EXPORT_FILENAME,
        )

    return app


HTML_TEMPLATE = r"""
<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8"/>
<title>{{ title }}</title>
<meta name="viewport" content="width=device-width,initial-scale=1"/>
<style>
body { font-family: 'Noto Sans', Arial, sans-serif; background:#1f2937; color:#e5e7eb; margin:0; padding:0; }
.container { max-width:960px; margin:30px auto; background:#111827; padding:28px; border-radius:12px; box-shadow:0 8px 30px rgba(0,0,0,0.3); }
.header { text-align:center; border-bottom:3px solid #7c3aed; padding-bottom:12px; margin-bottom:18px; }
.header h1 { margin:8px 0; font-size:2rem; color:#c4b5fd; }
section { background:#1f2937; padding:18px; border-radius:10px; margin-bottom:18px; }
label { display:block; font-weight:700; margin:10px 0 4px 0; }
input[type=text], input[type=number], select, textarea { width:100%; box-sizing:border-box; padding:10px; border-radius:6px; border:1px solid #4b5563; background:#374151; color:#e5e7eb; }
textarea { min-height:140px; }
button { padding:10px 16px; border-radius:20px; border:none; font-weight:800; cursor:pointer; margin-top:10px; background:#7c3aed; color:#fff; }
button.secondary { background:#4b5563; }
button.danger { background:#dc2626; }
.prize-row, .draw-row { display:flex; justify-content:space-between; align-items:center; padding:8px 0; border-bottom:1px solid #374151; }
.prize-row img, .draw-row img { max-height:48px; border-radius:6px; margin-right:8px; }
#lotteryScreen { display:none; min-height:100vh; background-size:cover; background-position:center; text-align:center; padding:40px 12px; box-sizing:border-box; }
#lotteryPrize img { width:220px; height:220px; object-fit:cover; border-radius:50%; border:4px solid #facc15; }
#names { display:flex; flex-wrap:wrap; gap:14px; justify-content:center; margin:30px 0; }
.name { background:#7c3aed; padding:18px 28px; border-radius:14px; font-size:2rem; font-weight:800; min-width:160px; }
#toast { position:fixed; bottom:16px; right:16px; max-width:360px; background:#dc2626; color:#fff; padding:14px; border-radius:10px; display:none; }
#toast button { margin:0 0 0 10px; padding:2px 8px; background:transparent; }
</style>
</head>
<body>
<div id="settingsScreen" class="container">
  <header class="header">
    <h1 id="settingsTitle">{{ title }}</h1>
    <div id="statsBar">Participants: <span id="participantCount">0</span> | Drawable: <span id="poolSize">0</span> | Draws: <span id="drawCount">0</span></div>
  </header>

  <section>
    <h3>Participants</h3>
    <textarea id="participants" placeholder="One name per line"></textarea>
    <label for="participantFile">Import from spreadsheet (names in the first column)</label>
    <input type="file" id="participantFile" accept=".xlsx,.csv">
  </section>

  <section>
    <h3>Draw settings</h3>
    <label for="title">Title</label><input type="text" id="title">
    <label for="subtitle">Subtitle</label><input type="text" id="subtitle">
    <label for="winnerCount">Number of winners per draw</label><input type="number" id="winnerCount" min="1" value="1">
    <label for="rollingSpeed">Rolling speed</label>
    <select id="rollingSpeed"><option value="slow">Slow</option><option value="medium">Medium</option><option value="fast">Fast</option></select>
    <label><input type="checkbox" id="excludeWinners"> Exclude previous winners</label>
    <label for="backgroundFile">Background image (max 5MB)</label>
    <input type="file" id="backgroundFile" accept="image/*">
    <button class="secondary" id="clearBackgroundBtn">Clear background</button>
  </section>

  <section>
    <h3>Prizes</h3>
    <div id="prizeList"></div>
    <label for="prizeName">New prize</label><input type="text" id="prizeName">
    <input type="file" id="prizeImage" accept="image/*">
    <button id="addPrizeBtn">Add prize</button>
  </section>

  <button id="startBtn">Go to draw</button>

  <section>
    <h3>Draw history</h3>
    <div id="historyList"></div>
    <button class="secondary" id="exportBtn">Export to Excel</button>
    <button class="danger" id="resetBtn">Reset history</button>
  </section>
</div>

<div id="lotteryScreen">
  <button class="secondary" id="backBtn">Back to settings</button>
  <h1 id="lotteryTitle"></h1>
  <h3 id="lotterySubtitle"></h3>
  <div id="lotteryPrize"></div>
  <div id="names"></div>
  <button id="rollBtn">Start</button>
</div>

<div id="toast"><span id="toastText"></span><button onclick="hideError()">&#x2715;</button></div>

<script>
let state = null;
let previewTimer = null;
let rolling = false;

function showError(msg) {
  document.getElementById('toastText').textContent = msg;
  document.getElementById('toast').style.display = 'block';
}
function hideError() { document.getElementById('toast').style.display = 'none'; }

async function api(url, options) {
  const res = await fetch(url, options || {});
  const isJson = (res.headers.get('content-type') || '').includes('json');
  const data = isJson ? await res.json() : null;
  if (!res.ok) throw new Error((data && data.error) || ('Request failed: ' + res.status));
  return data;
}
function postJson(url, body, method) {
  return api(url, {method: method || 'POST', headers: {'Content-Type': 'application/json'}, body: JSON.stringify(body || {})});
}
function postFile(url, field, file, extra) {
  const form = new FormData();
  form.append(field, file);
  Object.entries(extra || {}).forEach(([k, v]) => form.append(k, v));
  return api(url, {method: 'POST', body: form});
}

function render(s) {
  state = s;
  document.getElementById('settingsTitle').textContent = s.title;
  document.getElementById('title').value = s.title;
  document.getElementById('subtitle').value = s.subtitle;
  document.getElementById('participants').value = s.participants_text;
  document.getElementById('winnerCount').value = s.winner_count;
  document.getElementById('rollingSpeed').value = s.rolling_speed;
  document.getElementById('excludeWinners').checked = s.exclude_previous_winners;
  document.getElementById('participantCount').textContent = s.participant_count;
  document.getElementById('poolSize').textContent = s.pool_size;
  document.getElementById('drawCount').textContent = s.history.length;
  renderPrizes(s);
  renderHistory(s);
  const lottery = document.getElementById('lotteryScreen');
  lottery.style.backgroundImage = s.background_image ? `url(${s.background_image})` : '';
  document.getElementById('lotteryTitle').textContent = s.title;
  document.getElementById('lotterySubtitle').textContent = s.subtitle;
  const onLottery = s.page === 'lottery';
  lottery.style.display = onLottery ? 'block' : 'none';
  document.getElementById('settingsScreen').style.display = onLottery ? 'none' : 'block';
}

function renderPrizes(s) {
  const list = document.getElementById('prizeList');
  list.innerHTML = '';
  s.prizes.forEach(p => {
    const row = document.createElement('div'); row.className = 'prize-row';
    const left = document.createElement('label');
    const radio = document.createElement('input'); radio.type = 'radio'; radio.name = 'prize';
    radio.checked = p.id === s.selected_prize_id;
    radio.onchange = () => postJson('/api/prizes/select', {prize_id: p.id}).then(render).catch(e => showError(e.message));
    left.appendChild(radio);
    if (p.image_url) { const img = document.createElement('img'); img.src = p.image_url; left.appendChild(img); }
    left.appendChild(document.createTextNode(p.name));
    const del = document.createElement('button'); del.className = 'danger'; del.textContent = 'Delete';
    del.onclick = () => api('/api/prizes/' + p.id, {method: 'DELETE'}).then(render).catch(e => showError(e.message));
    row.appendChild(left); row.appendChild(del);
    list.appendChild(row);
  });
  const prize = s.prizes.find(p => p.id === s.selected_prize_id);
  const box = document.getElementById('lotteryPrize');
  box.innerHTML = '';
  if (prize) {
    if (prize.image_url) { const img = document.createElement('img'); img.src = prize.image_url; box.appendChild(img); }
    const h = document.createElement('h2'); h.textContent = prize.name; box.appendChild(h);
  }
}

function renderHistory(s) {
  const list = document.getElementById('historyList');
  list.innerHTML = '';
  if (!s.history.length) { list.textContent = 'No draws yet.'; return; }
  s.history.forEach(d => {
    const row = document.createElement('div'); row.className = 'draw-row';
    const info = document.createElement('div');
    const head = document.createElement('b');
    head.textContent = (d.prize ? d.prize.name : 'No prize') + ' - ' + new Date(d.timestamp).toLocaleString();
    info.appendChild(head);
    const winners = document.createElement('div'); winners.textContent = d.winners.join(', ') || 'No winners';
    info.appendChild(winners);
    row.appendChild(info);
    if (d.editable) {
      const edit = document.createElement('button'); edit.className = 'secondary'; edit.textContent = 'Edit';
      edit.onclick = () => {
        const text = prompt('One winner per line', d.winners.join('\n'));
        if (text === null) return;
        postJson('/api/history/' + d.id, {winners: text}, 'PUT').then(render).catch(e => showError(e.message));
      };
      row.appendChild(edit);
    }
    list.appendChild(row);
  });
}

function renderNames(names) {
  const box = document.getElementById('names');
  box.innerHTML = '';
  names.forEach(n => { const div = document.createElement('div'); div.className = 'name'; div.textContent = n; box.appendChild(div); });
}

function saveSettings() {
  return postJson('/api/settings', {
    title: document.getElementById('title').value,
    subtitle: document.getElementById('subtitle').value,
    participants: document.getElementById('participants').value,
    winner_count: document.getElementById('winnerCount').value,
    rolling_speed: document.getElementById('rollingSpeed').value,
    exclude_previous_winners: document.getElementById('excludeWinners').checked,
  }).then(render);
}

['title', 'subtitle', 'participants', 'winnerCount', 'rollingSpeed', 'excludeWinners'].forEach(id => {
  document.getElementById(id).onchange = () => saveSettings().catch(e => showError(e.message));
});

document.getElementById('participantFile').onchange = async (e) => {
  const file = e.target.files[0];
  if (!file) return;
  try { await saveSettings(); render(await postFile('/api/participants/upload', 'file', file)); hideError(); }
  catch (err) { showError(err.message); }
  e.target.value = '';
};

document.getElementById('backgroundFile').onchange = async (e) => {
  const file = e.target.files[0];
  if (!file) return;
  try { render(await postFile('/api/background', 'file', file)); } catch (err) { showError(err.message); e.target.value = ''; }
};
document.getElementById('clearBackgroundBtn').onclick = () => api('/api/background', {method: 'DELETE'}).then(render).catch(e => showError(e.message));

document.getElementById('addPrizeBtn').onclick = async () => {
  const name = document.getElementById('prizeName').value;
  const imageInput = document.getElementById('prizeImage');
  const form = new FormData();
  form.append('name', name);
  if (imageInput.files[0]) form.append('image', imageInput.files[0]);
  try {
    render(await api('/api/prizes', {method: 'POST', body: form}));
    document.getElementById('prizeName').value = ''; imageInput.value = '';
  } catch (err) { showError(err.message); }
};

document.getElementById('startBtn').onclick = async () => {
  try { await saveSettings(); render(await postJson('/api/lottery/open')); hideError(); renderNames([]); }
  catch (err) { showError(err.message); }
};

document.getElementById('backBtn').onclick = async () => {
  stopPolling();
  rolling = false;
  document.getElementById('rollBtn').textContent = 'Start';
  render(await postJson('/api/lottery/close'));
};

function stopPolling() { if (previewTimer !== null) { clearInterval(previewTimer); previewTimer = null; } }

document.getElementById('rollBtn').onclick = async () => {
  const btn = document.getElementById('rollBtn');
  btn.disabled = true;
  try {
    if (!rolling) {
      const started = await postJson('/api/draw/start');
      rolling = true;
      renderNames(started.names);
      previewTimer = setInterval(async () => {
        const p = await api('/api/draw/preview');
        if (previewTimer !== null && p.rolling) renderNames(p.names);
      }, started.interval_ms);
      btn.textContent = 'Stop';
    } else {
      stopPolling();
      rolling = false;
      const result = await postJson('/api/draw/stop');
      renderNames(result.record.winners);
      render(result);
      btn.textContent = 'Start';
    }
  } catch (err) {
    stopPolling(); rolling = false; btn.textContent = 'Start';
    showError(err.message);
  } finally {
    btn.disabled = false;
  }
};

document.getElementById('exportBtn').onclick = () => { window.location = '/api/history/export'; };
document.getElementById('resetBtn').onclick = () => {
  if (!confirm('Clear the whole draw history? This cannot be undone.')) return;
  api('/api/history', {method: 'DELETE'}).then(render).catch(e => showError(e.message));
};

api('/api/state').then(render).catch(e => showError(e.message));
</script>
</body>
</html>
"""


def main():
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format='%(asctime)s - %(levelname)s - [%(name)s] - %(message)s',
    )
    app = create_app()
    logger.info("Lucky Draw running on http://%s:%d", config.HOST, config.PORT)
    app.run(host=config.HOST, port=config.PORT, debug=config.DEBUG)


if __name__ == "__main__":
    main()
