# anonychat/domain/common/replies.py
"""
Every text the bot sends, in one place.
"""

from __future__ import annotations

from anonychat.domain.common.templates import T

# ---- Menu / profile ----
MENU = T(
    "Hai *{nickname}*! 👋 Selamat datang di bot AnonyChat & Stiker.\n\n"
    "*Fitur yang tersedia:*\n\n"
    "1.  *!chat*\n    _Mencari partner ngobrol acak._\n\n"
    "2.  *!stop* / *!skip*\n    _Menghentikan sesi chat, game, atau pencarian._\n\n"
    "3.  *!lapor*\n    _Melaporkan partner chat Anda saat ini._\n\n"
    "4.  *!game*\n    _Main kuis sambil mengumpulkan XP._\n\n"
    "5.  *!profil* / *!nick <nama>*\n    _Lihat profil atau ganti nickname._\n\n"
    "6.  *!stiker*\n    _Kirim gambar dengan caption ini untuk jadi stiker._",
    "nickname",
)
PROFILE = T("👤 *{nickname}*\n⭐ XP: {xp}\n🏅 Tier: {tier}", "nickname", "xp", "tier")
NICK_CHANGED = T("Sip! Nickname kamu sekarang *{nickname}*.", "nickname")
NICK_INVALID = T("Nickname harus 1-24 karakter. Contoh: *!nick Budi*")

# ---- Matchmaking ----
ALREADY_QUEUED = T("Tenang, kamu sudah dalam antrian kok. Aku lagi cariin partner yang pas, sabar ya!")
BUSY = T("Kamu masih dalam sesi lain. Ketik *!stop* dulu ya.")
QUEUE_JOINED = T("🔎 Oke, aku cariin partner buat kamu ya... Ketik *!stop* untuk membatalkan.")
STILL_SEARCHING = T("Masih mencari partner, sabar ya... ⏳")
PAIRED = T(
    "Partner ditemukan! 🎉 Silakan mulai ngobrol.\n"
    "Ketik *!stop* / *!skip* untuk mengakhiri, *!lapor* untuk melaporkan partner."
)
QUEUE_CANCELLED = T("Pencarian dibatalkan. Kalau berubah pikiran, panggil aku lagi dengan *!chat* ya!")
NOTHING_TO_STOP = T("Hmm, sepertinya kamu sedang tidak dalam sesi chat atau antrian.")
QUEUE_EXPIRED = T(
    "Belum ada partner yang tersedia nih. 🤖 Sambil menunggu, ngobrol sama aku dulu yuk!\n"
    "Ketik *!chat* untuk mencari partner lagi atau *!stop* untuk berhenti."
)

# ---- Paired session ----
SESSION_ENDED_SELF = T("Sesi chat diakhiri. Ketik *!chat* untuk mencari partner baru.")
SESSION_ENDED_PARTNER = T("Yah, partnermu telah mengakhiri sesi. Jangan sedih, yuk cari lagi dengan ketik *!chat*! 😊")
REPORT_ACCEPTED = T("Laporanmu telah diterima dan akan ditinjau oleh admin. Sesi chat ini telah dihentikan.")
REPORT_PARTNER = T("Sesi chat telah dihentikan oleh sistem karena adanya laporan dari partner.")
MEDIA_FORWARDING = T("⏳ _Sedang meneruskan media ke partner..._")
MEDIA_FORWARD_FAILED = T("Duh, maaf, gagal meneruskan media.")
PROFANITY_WARNING = T("Eits, bahasanya dijaga ya. Pesanmu nggak aku kirim dan aku catat sebagai pelanggaran.")

# ---- Sticker ----
STICKER_WORKING = T("Sip, stikernya lagi dibikin nih...")
STICKER_HINT = T("Kirim gambarnya dulu dengan caption *!stiker* untuk dibuatkan stiker ya.")
STICKER_FAILED = T("Duh, maaf, sepertinya ada masalah saat membuat stiker.")

# ---- Game ----
GAME_MENU = T(
    "🎮 *Pilih game:*\n\n"
    "1. Tebak Kata\n"
    "2. Trivia\n"
    "3. Matematika\n\n"
    "Balas dengan nomor atau nama game-nya."
)
GAME_INVALID_CHOICE = T("Pilihan game tidak dikenal. Ketik *!game* untuk melihat daftar lagi.")
GAME_QUESTION = T(
    "🧠 *{game_name}*\n\n{prompt}\n\n_Waktumu {seconds} detik. Ketik *!stop* untuk berhenti._",
    "game_name",
    "prompt",
    "seconds",
)
GAME_CORRECT = T("✅ Benar! +{gained} XP (total {xp}, tier *{tier}*)", "gained", "xp", "tier")
GAME_TIER_UP = T("🏅 Selamat, kamu naik ke tier *{tier}*!", "tier")
GAME_WRONG = T("❌ Kurang tepat. Jawabannya: *{answer}*", "answer")
GAME_TIMEOUT = T("⏰ Waktu habis! Jawabannya: *{answer}*", "answer")
GAME_STOPPED = T("Game selesai. Makasih sudah main! Ketik *!game* untuk main lagi.")
GAME_GENERATION_FAILED = T("Maaf, soalnya gagal dibuat. Game dihentikan dulu ya, coba lagi nanti dengan *!game*.")

# ---- AI fallback ----
FALLBACK_STOPPED = T("Oke, sampai jumpa! Ketik *!chat* kalau mau cari partner lagi.")
FALLBACK_FAILED = T("Maaf, aku lagi bingung nih. Coba kirim pesan lagi ya.")
FALLBACK_TEXT_ONLY = T("Aku cuma bisa membaca pesan teks ya. 🙏")
